"""Answer Service — answering approved questions, editing and deleting own answers.

Invariants:
    - Answers can only be added to an existing, APPROVED question
    - New and edited answers are PENDING and notify admins
    - Public listing shows APPROVED answers only, newest first
    - Only the author edits or deletes an answer here (admins use admin_service)
"""

import logging
from datetime import datetime, timezone

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from doconnect.core.domain_types import ContentStatus, NotificationType
from doconnect.core.enforce_moderation import excerpt, status_after_edit
from doconnect.core.errors import (
    ForbiddenError, InvalidOperationError, ResourceNotFoundError,
)
from doconnect.core.pagination import normalize_page, page_envelope, page_offset
from doconnect.models.answer import Answer
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.schemas.answer import (
    AnswerListResponse, AnswerResponse, AnswerWithQuestionResponse,
)
from doconnect.services.content_removal import purge_answers
from doconnect.services.file_service import FileService
from doconnect.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def answer_with_question(answer: Answer) -> AnswerWithQuestionResponse:
    """Requires answer.question to be loaded (selectinload)."""
    return AnswerWithQuestionResponse(
        **AnswerResponse.model_validate(answer).model_dump(),
        question_title=answer.question.title,
    )


class AnswerService:
    def __init__(
        self,
        db: AsyncSession,
        files: FileService,
        notifications: NotificationService,
    ):
        self.db = db
        self.files = files
        self.notifications = notifications

    async def list_for_question(
        self, question_id: int, page: int = 1, page_size: int = 10,
    ) -> AnswerListResponse:
        if await self.db.get(Question, question_id) is None:
            raise ResourceNotFoundError("Question", question_id)

        page, page_size = normalize_page(page, page_size)
        criteria = (
            Answer.question_id == question_id,
            Answer.status == ContentStatus.APPROVED.value,
        )
        total = await self.db.execute(select(func.count(Answer.id)).where(*criteria))
        result = await self.db.execute(
            select(Answer)
            .where(*criteria)
            .order_by(Answer.created_at.desc(), Answer.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size),
        )
        items = [AnswerResponse.model_validate(a) for a in result.scalars().all()]
        return AnswerListResponse(
            **page_envelope("answers", items, total.scalar_one(), page, page_size),
        )

    async def list_for_user(self, user_id: int) -> list[AnswerWithQuestionResponse]:
        result = await self.db.execute(
            select(Answer)
            .options(selectinload(Answer.question))
            .where(Answer.user_id == user_id)
            .order_by(Answer.created_at.desc(), Answer.id.desc()),
        )
        return [answer_with_question(a) for a in result.scalars().all()]

    async def create(
        self,
        author: User,
        question_id: int,
        content: str,
        files: list[UploadFile] | None = None,
    ) -> AnswerResponse:
        question = await self.db.get(Question, question_id)
        if question is None:
            raise ResourceNotFoundError("Question", question_id)
        if question.status != ContentStatus.APPROVED.value:
            raise InvalidOperationError("Answers can only be added to approved questions")

        now = datetime.now(timezone.utc)
        answer = Answer(
            content=content.strip(),
            status=ContentStatus.PENDING.value,
            question_id=question_id,
            user_id=author.id,
            created_at=now,
        )
        self.db.add(answer)
        question.last_activity = now
        try:
            await self.db.flush()
            await self.files.save_files(files, answer_id=answer.id)
            await self.notifications.notify_admins(
                "New Answer Pending Review",
                f"{author.user_name} answered '{question.title}'. It is waiting for approval.",
                NotificationType.CONTENT_PENDING,
                related_question_id=question_id,
                related_answer_id=answer.id,
                exclude_user_id=author.id,
            )
            await self.db.commit()
        except Exception:
            self.files.discard_written()
            raise
        await self.notifications.deliver()

        logger.info(
            "Answer created",
            extra={"answer_id": answer.id, "question_id": question_id, "user_id": author.id},
        )
        return AnswerResponse.model_validate(await self._reload(answer.id))

    async def update(
        self,
        answer_id: int,
        actor: User,
        content: str,
        files: list[UploadFile] | None = None,
    ) -> AnswerResponse:
        answer = await self._get_owned(answer_id, actor, "edit")
        answer.content = content.strip()
        answer.status = status_after_edit().value
        answer.updated_at = datetime.now(timezone.utc)
        try:
            await self.files.save_files(files, answer_id=answer.id)
            await self.notifications.notify_admins(
                "Answer Updated",
                f"{actor.user_name} edited the answer '{excerpt(answer.content)}'. "
                "It is waiting for approval.",
                NotificationType.CONTENT_PENDING,
                related_question_id=answer.question_id,
                related_answer_id=answer.id,
                exclude_user_id=actor.id,
            )
            await self.db.commit()
        except Exception:
            self.files.discard_written()
            raise
        await self.notifications.deliver()

        logger.info(
            "Answer updated, back to pending",
            extra={"answer_id": answer_id, "user_id": actor.id},
        )
        return AnswerResponse.model_validate(await self._reload(answer_id))

    async def delete(self, answer_id: int, actor: User) -> None:
        await self._get_owned(answer_id, actor, "delete")
        file_paths = await purge_answers(self.db, [answer_id])
        await self.db.commit()
        self.files.remove_stored_files(file_paths)
        logger.info(
            "Answer deleted",
            extra={"answer_id": answer_id, "user_id": actor.id},
        )

    async def _get_owned(self, answer_id: int, actor: User, verb: str) -> Answer:
        answer = await self.db.get(Answer, answer_id)
        if answer is None:
            raise ResourceNotFoundError("Answer", answer_id)
        if answer.user_id != actor.id:
            raise ForbiddenError(f"You can only {verb} your own answers")
        return answer

    async def _reload(self, answer_id: int) -> Answer:
        result = await self.db.execute(
            select(Answer)
            .where(Answer.id == answer_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one()
