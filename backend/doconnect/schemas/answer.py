"""Answer Schemas — answer payloads for public, author and admin views."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

from doconnect.schemas.common import ImageResponse, UserSummary

ANSWER_CONTENT_MIN = 10

AnswerText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=ANSWER_CONTENT_MIN),
]


class AnswerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    status: str
    up_votes: int
    down_votes: int
    created_at: datetime
    updated_at: datetime | None = None
    question_id: int
    user: UserSummary
    images: list[ImageResponse] = []


class AnswerWithQuestionResponse(AnswerResponse):
    """Answer plus the title of the question it replies to (own and admin lists)."""
    question_title: str


class AnswerListResponse(BaseModel):
    answers: list[AnswerResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class AnswerWithQuestionListResponse(BaseModel):
    answers: list[AnswerWithQuestionResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int
