"""Admin Routes — dashboard, moderation queues, content removal, user management.

Invariants:
    - Every route requires the Admin role (require_admin)
"""

from fastapi import APIRouter, Depends, Query, Response, status

from doconnect.api.dependencies import get_admin_service, require_admin
from doconnect.core.domain_types import ContentStatus
from doconnect.models.user import User
from doconnect.schemas.admin import (
    AdminUserListResponse, DashboardStats, RoleAssignmentRequest,
    RoleAssignmentResponse, StatusUpdateRequest, StatusUpdateResponse,
    UserStatusResponse,
)
from doconnect.schemas.answer import AnswerWithQuestionListResponse
from doconnect.schemas.question import QuestionListResponse
from doconnect.services.admin_service import AdminService

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.dashboard_stats()


# ─── Questions ──────────────────────────────────────────────────

@router.get("/questions/pending", response_model=QuestionListResponse)
async def pending_questions(
    page: int = Query(1),
    page_size: int = Query(10),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_questions(ContentStatus.PENDING, page, page_size)


@router.get("/questions", response_model=QuestionListResponse)
async def all_questions(
    status_filter: ContentStatus | None = Query(None, alias="status"),
    page: int = Query(1),
    page_size: int = Query(10),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_questions(status_filter, page, page_size)


@router.put("/questions/{question_id}/status", response_model=StatusUpdateResponse)
async def update_question_status(
    question_id: int,
    body: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.set_question_status(question_id, body.status, admin)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.delete_question(question_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Answers ────────────────────────────────────────────────────

@router.get("/answers/pending", response_model=AnswerWithQuestionListResponse)
async def pending_answers(
    page: int = Query(1),
    page_size: int = Query(10),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_answers(ContentStatus.PENDING, page, page_size)


@router.get("/answers", response_model=AnswerWithQuestionListResponse)
async def all_answers(
    status_filter: ContentStatus | None = Query(None, alias="status"),
    page: int = Query(1),
    page_size: int = Query(10),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_answers(status_filter, page, page_size)


@router.put("/answers/{answer_id}/status", response_model=StatusUpdateResponse)
async def update_answer_status(
    answer_id: int,
    body: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.set_answer_status(answer_id, body.status, admin)


@router.delete("/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.delete_answer(answer_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Users ──────────────────────────────────────────────────────

@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    is_active: bool | None = Query(None),
    page: int = Query(1),
    page_size: int = Query(10),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_users(is_active, page, page_size)


@router.put("/users/{user_id}/toggle-status", response_model=UserStatusResponse)
async def toggle_user_status(
    user_id: int,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.toggle_user_status(user_id, admin)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.delete_user(user_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users/{user_id}/roles", response_model=RoleAssignmentResponse)
async def assign_roles(
    user_id: int,
    body: RoleAssignmentRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.assign_roles(user_id, body.roles, admin)
