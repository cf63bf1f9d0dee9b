"""Shared response shapes: author summary, image metadata, plain messages."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Author shown next to questions and answers."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_name: str
    first_name: str
    last_name: str


class ImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    content_type: str
    file_size: int
    uploaded_at: datetime
    url: str


class MessageResponse(BaseModel):
    message: str
