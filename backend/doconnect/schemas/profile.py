"""Profile Schemas — own profile view, edit and password change."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ProfileResponse(BaseModel):
    id: int
    user_name: str
    email: str
    first_name: str
    last_name: str
    bio: str | None = None
    website: str | None = None
    location: str | None = None
    profile_picture: str | None = None
    reputation: int = 0
    joined_at: datetime
    question_count: int
    answer_count: int
    roles: list[str]


class ProfileUpdateRequest(BaseModel):
    """Omitted fields keep their current value."""
    first_name: str | None = Field(None, min_length=1, max_length=50)
    last_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=500)
    website: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=100)
