"""Admin Service — moderation queue, content removal and user management.

Invariants:
    - Status changes go through core.enforce_moderation.validate_status_change
    - Every moderation decision notifies the content's author; approving an
      answer also tells the question's author (unless they wrote the answer)
    - An admin can neither deactivate, delete nor demote their own account
    - Admin accounts cannot be deleted through this service
    - Role assignment replaces the full role set; unknown role names are rejected

Design Decisions:
    - Caller (route) guarantees the actor holds the Admin role; this service
      does not re-check it
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from doconnect.core.domain_types import (
    ContentKind, ContentStatus, NotificationType, RoleName,
)
from doconnect.core.enforce_moderation import (
    build_moderation_notice, excerpt, status_message, validate_status_change,
)
from doconnect.core.errors import (
    InvalidArgumentError, InvalidOperationError, ResourceNotFoundError,
)
from doconnect.core.pagination import normalize_page, page_envelope, page_offset
from doconnect.models.answer import Answer
from doconnect.models.image import Image
from doconnect.models.question import Question
from doconnect.models.user import Role, User
from doconnect.schemas.admin import (
    AdminUserListResponse, AdminUserResponse, DashboardStats,
    RoleAssignmentResponse, StatusUpdateResponse, UserStatusResponse,
)
from doconnect.schemas.answer import AnswerWithQuestionListResponse
from doconnect.schemas.question import QuestionListResponse, QuestionResponse
from doconnect.services.answer_service import answer_with_question
from doconnect.services.content_removal import (
    purge_answers, purge_questions, purge_user,
)
from doconnect.services.file_service import FileService
from doconnect.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        db: AsyncSession,
        files: FileService,
        notifications: NotificationService,
    ):
        self.db = db
        self.files = files
        self.notifications = notifications

    # ─── Dashboard ──────────────────────────────────────────────

    async def dashboard_stats(self) -> DashboardStats:
        question_counts = await self._status_counts(Question)
        answer_counts = await self._status_counts(Answer)
        return DashboardStats(
            total_users=await self._count(User),
            total_questions=sum(question_counts.values()),
            total_answers=sum(answer_counts.values()),
            total_images=await self._count(Image),
            pending_questions=question_counts[ContentStatus.PENDING.value],
            approved_questions=question_counts[ContentStatus.APPROVED.value],
            rejected_questions=question_counts[ContentStatus.REJECTED.value],
            pending_answers=answer_counts[ContentStatus.PENDING.value],
            approved_answers=answer_counts[ContentStatus.APPROVED.value],
            rejected_answers=answer_counts[ContentStatus.REJECTED.value],
        )

    # ─── Questions ──────────────────────────────────────────────

    async def list_questions(
        self,
        status: ContentStatus | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> QuestionListResponse:
        page, page_size = normalize_page(page, page_size)
        criteria = [Question.status == status.value] if status else []
        total = await self.db.execute(select(func.count(Question.id)).where(*criteria))
        result = await self.db.execute(
            select(Question)
            .where(*criteria)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size),
        )
        items = [QuestionResponse.model_validate(q) for q in result.scalars().all()]
        return QuestionListResponse(
            **page_envelope("questions", items, total.scalar_one(), page, page_size),
        )

    async def set_question_status(
        self, question_id: int, target: ContentStatus, admin: User,
    ) -> StatusUpdateResponse:
        question = await self.db.get(Question, question_id)
        if question is None:
            raise ResourceNotFoundError("Question", question_id)
        validate_status_change(
            ContentKind.QUESTION, ContentStatus(question.status), target,
        )

        question.status = target.value
        question.updated_at = datetime.now(timezone.utc)
        notice_type, title, message = build_moderation_notice(
            ContentKind.QUESTION, question.title, target,
        )
        await self.notifications.notify_user(
            question.user_id, title, message, notice_type,
            related_question_id=question.id,
        )
        await self.db.commit()
        await self.notifications.deliver()

        logger.info(
            f"Question moderated: {target.value}",
            extra={"question_id": question_id, "user_id": admin.id},
        )
        return StatusUpdateResponse(
            message=status_message(ContentKind.QUESTION, target), status=target,
        )

    async def delete_question(self, question_id: int, admin: User) -> None:
        if await self.db.get(Question, question_id) is None:
            raise ResourceNotFoundError("Question", question_id)
        file_paths = await purge_questions(self.db, [question_id])
        await self.db.commit()
        self.files.remove_stored_files(file_paths)
        logger.info(
            "Question deleted by admin",
            extra={"question_id": question_id, "user_id": admin.id},
        )

    # ─── Answers ────────────────────────────────────────────────

    async def list_answers(
        self,
        status: ContentStatus | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> AnswerWithQuestionListResponse:
        page, page_size = normalize_page(page, page_size)
        criteria = [Answer.status == status.value] if status else []
        total = await self.db.execute(select(func.count(Answer.id)).where(*criteria))
        result = await self.db.execute(
            select(Answer)
            .options(selectinload(Answer.question))
            .where(*criteria)
            .order_by(Answer.created_at.desc(), Answer.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size),
        )
        items = [answer_with_question(a) for a in result.scalars().all()]
        return AnswerWithQuestionListResponse(
            **page_envelope("answers", items, total.scalar_one(), page, page_size),
        )

    async def set_answer_status(
        self, answer_id: int, target: ContentStatus, admin: User,
    ) -> StatusUpdateResponse:
        result = await self.db.execute(
            select(Answer)
            .options(selectinload(Answer.question))
            .where(Answer.id == answer_id),
        )
        answer = result.scalar_one_or_none()
        if answer is None:
            raise ResourceNotFoundError("Answer", answer_id)
        validate_status_change(ContentKind.ANSWER, ContentStatus(answer.status), target)

        answer.status = target.value
        answer.updated_at = datetime.now(timezone.utc)
        question = answer.question
        notice_type, title, message = build_moderation_notice(
            ContentKind.ANSWER, excerpt(answer.content), target,
        )
        await self.notifications.notify_user(
            answer.user_id, title, message, notice_type,
            related_question_id=question.id, related_answer_id=answer.id,
        )
        if target == ContentStatus.APPROVED and question.user_id != answer.user_id:
            question.last_activity = answer.updated_at
            await self.notifications.notify_user(
                question.user_id,
                "New Answer",
                f"Your question '{question.title}' has a new answer.",
                NotificationType.QUESTION_ANSWER,
                related_question_id=question.id,
                related_answer_id=answer.id,
            )
        await self.db.commit()
        await self.notifications.deliver()

        logger.info(
            f"Answer moderated: {target.value}",
            extra={"answer_id": answer_id, "user_id": admin.id},
        )
        return StatusUpdateResponse(
            message=status_message(ContentKind.ANSWER, target), status=target,
        )

    async def delete_answer(self, answer_id: int, admin: User) -> None:
        if await self.db.get(Answer, answer_id) is None:
            raise ResourceNotFoundError("Answer", answer_id)
        file_paths = await purge_answers(self.db, [answer_id])
        await self.db.commit()
        self.files.remove_stored_files(file_paths)
        logger.info(
            "Answer deleted by admin",
            extra={"answer_id": answer_id, "user_id": admin.id},
        )

    # ─── Users ──────────────────────────────────────────────────

    async def list_users(
        self,
        is_active: bool | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> AdminUserListResponse:
        page, page_size = normalize_page(page, page_size)
        criteria = [User.is_active.is_(is_active)] if is_active is not None else []
        total = await self.db.execute(select(func.count(User.id)).where(*criteria))

        question_count = (
            select(func.count(Question.id))
            .where(Question.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        answer_count = (
            select(func.count(Answer.id))
            .where(Answer.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(User, question_count, answer_count)
            .where(*criteria)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size),
        )
        items = [
            AdminUserResponse(
                id=user.id,
                user_name=user.user_name,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                is_active=user.is_active,
                created_at=user.created_at,
                roles=user.role_names,
                question_count=questions,
                answer_count=answers,
            )
            for user, questions, answers in result.all()
        ]
        return AdminUserListResponse(
            **page_envelope("users", items, total.scalar_one(), page, page_size),
        )

    async def toggle_user_status(self, user_id: int, admin: User) -> UserStatusResponse:
        if user_id == admin.id:
            raise InvalidOperationError("You cannot deactivate your own account")
        user = await self._get_user(user_id)
        user.is_active = not user.is_active
        user.updated_at = datetime.now(timezone.utc)
        await self.db.commit()

        state = "activated" if user.is_active else "deactivated"
        logger.info(f"User {state}", extra={"user_id": user_id})
        return UserStatusResponse(
            message=f"User {state} successfully", is_active=user.is_active,
        )

    async def delete_user(self, user_id: int, admin: User) -> None:
        if user_id == admin.id:
            raise InvalidOperationError("You cannot delete your own account")
        user = await self._get_user(user_id)
        if user.has_role(RoleName.ADMIN.value):
            raise InvalidOperationError("Admin accounts cannot be deleted")

        file_paths = await purge_user(self.db, user_id)
        await self.db.commit()
        self.files.remove_stored_files(file_paths)
        logger.info(f"User {user_id} deleted by admin {admin.id}", extra={"user_id": user_id})

    async def assign_roles(
        self, user_id: int, role_names: list[str], admin: User,
    ) -> RoleAssignmentResponse:
        user = await self._get_user(user_id)
        wanted = sorted(set(role_names))
        if user_id == admin.id and RoleName.ADMIN.value not in wanted:
            raise InvalidOperationError("You cannot remove your own Admin role")
        result = await self.db.execute(select(Role).where(Role.name.in_(wanted)))
        roles = list(result.scalars().all())
        unknown = sorted(set(wanted) - {r.name for r in roles})
        if unknown:
            raise InvalidArgumentError(
                f"Unknown roles: {', '.join(unknown)}", "roles",
            )

        user.roles = roles
        user.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info(f"Roles set to {wanted}", extra={"user_id": user_id})
        return RoleAssignmentResponse(
            message="Roles updated successfully", roles=user.role_names,
        )

    # ─── Helpers ────────────────────────────────────────────────

    async def _get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def _count(self, model) -> int:
        result = await self.db.execute(select(func.count(model.id)))
        return result.scalar_one()

    async def _status_counts(self, model) -> dict[str, int]:
        result = await self.db.execute(
            select(model.status, func.count(model.id)).group_by(model.status),
        )
        counts = {status.value: 0 for status in ContentStatus}
        counts.update({status: count for status, count in result.all()})
        return counts
