"""Admin Schemas — dashboard counters, moderation and user management payloads."""

from datetime import datetime

from pydantic import BaseModel, Field

from doconnect.core.domain_types import ContentStatus


class DashboardStats(BaseModel):
    total_users: int
    total_questions: int
    total_answers: int
    total_images: int
    pending_questions: int
    approved_questions: int
    rejected_questions: int
    pending_answers: int
    approved_answers: int
    rejected_answers: int


class StatusUpdateRequest(BaseModel):
    status: ContentStatus


class StatusUpdateResponse(BaseModel):
    message: str
    status: ContentStatus


class AdminUserResponse(BaseModel):
    id: int
    user_name: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    created_at: datetime
    roles: list[str]
    question_count: int
    answer_count: int


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class UserStatusResponse(BaseModel):
    message: str
    is_active: bool


class RoleAssignmentRequest(BaseModel):
    roles: list[str] = Field(min_length=1)


class RoleAssignmentResponse(BaseModel):
    message: str
    roles: list[str]
