"""Question Service — public listing, detail view, authoring and deletion of questions.

Invariants:
    - Public listings and topic counts only ever include APPROVED questions
    - A non-approved question is visible to its author and admins only; everyone
      else gets the same 404 as for a missing id
    - Create and edit leave the question PENDING and notify admins
    - A rejected upload rolls back the whole create/edit, files included
    - Only the author edits; the author or an admin deletes

Design Decisions:
    - Reloads after writes use populate_existing so images and answer_count
      reflect the committed state
"""

import logging
from datetime import datetime, timezone

from fastapi import UploadFile
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import (
    ContentStatus, NotificationType, RoleName, VoteType,
)
from doconnect.core.enforce_moderation import status_after_edit
from doconnect.core.enforce_votes import compute_vote_stats
from doconnect.core.errors import ForbiddenError, ResourceNotFoundError
from doconnect.core.pagination import normalize_page, page_envelope, page_offset
from doconnect.models.answer import Answer
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.models.vote import Vote
from doconnect.schemas.answer import AnswerResponse
from doconnect.schemas.question import (
    QuestionDetailResponse, QuestionListResponse, QuestionResponse, TopicCount,
)
from doconnect.schemas.vote import VoteStats
from doconnect.services.content_removal import purge_questions
from doconnect.services.file_service import FileService
from doconnect.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TOP_TOPICS = 20


class QuestionService:
    def __init__(
        self,
        db: AsyncSession,
        files: FileService,
        notifications: NotificationService,
    ):
        self.db = db
        self.files = files
        self.notifications = notifications

    # ─── Reads ──────────────────────────────────────────────────

    async def list_approved(
        self,
        search: str | None = None,
        topic: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> QuestionListResponse:
        page, page_size = normalize_page(page, page_size)
        criteria = [Question.status == ContentStatus.APPROVED.value]
        if search and search.strip():
            term = search.strip()
            criteria.append(or_(
                Question.title.icontains(term, autoescape=True),
                Question.content.icontains(term, autoescape=True),
            ))
        if topic and topic.strip():
            criteria.append(Question.topic == topic.strip())

        total = await self.db.execute(
            select(func.count(Question.id)).where(*criteria),
        )
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

    async def topics(self) -> list[TopicCount]:
        count = func.count(Question.id).label("count")
        result = await self.db.execute(
            select(Question.topic, count)
            .where(Question.status == ContentStatus.APPROVED.value)
            .group_by(Question.topic)
            .order_by(count.desc(), Question.topic)
            .limit(TOP_TOPICS),
        )
        return [TopicCount(topic=t, count=c) for t, c in result.all()]

    async def list_for_user(self, user_id: int) -> list[QuestionResponse]:
        result = await self.db.execute(
            select(Question)
            .where(Question.user_id == user_id)
            .order_by(Question.created_at.desc(), Question.id.desc()),
        )
        return [QuestionResponse.model_validate(q) for q in result.scalars().all()]

    async def get_detail(
        self, question_id: int, viewer: User | None = None,
    ) -> QuestionDetailResponse:
        question = await self.db.get(Question, question_id)
        if question is None or not self._can_view(question, viewer):
            raise ResourceNotFoundError("Question", question_id)

        await self.db.execute(
            update(Question)
            .where(Question.id == question_id)
            .values(view_count=Question.view_count + 1),
        )
        await self.db.commit()
        question = await self._reload(question_id)

        answers = await self.db.execute(
            select(Answer)
            .where(
                Answer.question_id == question_id,
                Answer.status == ContentStatus.APPROVED.value,
            )
            .order_by(Answer.created_at, Answer.id),
        )
        votes = await self.db.execute(
            select(Vote.user_id, Vote.type).where(Vote.question_id == question_id),
        )
        stats = compute_vote_stats(
            [(uid, VoteType(t)) for uid, t in votes.all()],
            viewer.id if viewer else None,
        )
        return QuestionDetailResponse(
            **QuestionResponse.model_validate(question).model_dump(),
            answers=[AnswerResponse.model_validate(a) for a in answers.scalars().all()],
            vote_stats=VoteStats(**stats),
        )

    # ─── Writes ─────────────────────────────────────────────────

    async def create(
        self,
        author: User,
        title: str,
        content: str,
        topic: str,
        files: list[UploadFile] | None = None,
    ) -> QuestionResponse:
        now = datetime.now(timezone.utc)
        question = Question(
            title=title.strip(),
            content=content.strip(),
            topic=topic.strip(),
            status=ContentStatus.PENDING.value,
            user_id=author.id,
            created_at=now,
            last_activity=now,
        )
        self.db.add(question)
        try:
            await self.db.flush()
            await self.files.save_files(files, question_id=question.id)
            await self.notifications.notify_admins(
                "New Question Pending Review",
                f"{author.user_name} asked '{question.title}'. It is waiting for approval.",
                NotificationType.CONTENT_PENDING,
                related_question_id=question.id,
                exclude_user_id=author.id,
            )
            await self.db.commit()
        except Exception:
            self.files.discard_written()
            raise
        await self.notifications.deliver()

        logger.info(
            f"Question created: {question.title!r}",
            extra={"question_id": question.id, "user_id": author.id},
        )
        return QuestionResponse.model_validate(await self._reload(question.id))

    async def update(
        self,
        question_id: int,
        actor: User,
        title: str,
        content: str,
        topic: str,
        files: list[UploadFile] | None = None,
    ) -> QuestionResponse:
        question = await self.db.get(Question, question_id)
        if question is None:
            raise ResourceNotFoundError("Question", question_id)
        if question.user_id != actor.id:
            raise ForbiddenError("You can only edit your own questions")

        now = datetime.now(timezone.utc)
        question.title = title.strip()
        question.content = content.strip()
        question.topic = topic.strip()
        question.status = status_after_edit().value
        question.updated_at = now
        question.last_activity = now
        try:
            await self.files.save_files(files, question_id=question.id)
            await self.notifications.notify_admins(
                "Question Updated",
                f"{actor.user_name} edited '{question.title}'. It is waiting for approval.",
                NotificationType.CONTENT_PENDING,
                related_question_id=question.id,
                exclude_user_id=actor.id,
            )
            await self.db.commit()
        except Exception:
            self.files.discard_written()
            raise
        await self.notifications.deliver()

        logger.info(
            "Question updated, back to pending",
            extra={"question_id": question_id, "user_id": actor.id},
        )
        return QuestionResponse.model_validate(await self._reload(question_id))

    async def delete(self, question_id: int, actor: User) -> None:
        question = await self.db.get(Question, question_id)
        if question is None:
            raise ResourceNotFoundError("Question", question_id)
        if question.user_id != actor.id and not actor.has_role(RoleName.ADMIN.value):
            raise ForbiddenError("You can only delete your own questions")

        file_paths = await purge_questions(self.db, [question_id])
        await self.db.commit()
        self.files.remove_stored_files(file_paths)
        logger.info(
            "Question deleted",
            extra={"question_id": question_id, "user_id": actor.id},
        )

    # ─── Helpers ────────────────────────────────────────────────

    @staticmethod
    def _can_view(question: Question, viewer: User | None) -> bool:
        if question.status == ContentStatus.APPROVED.value:
            return True
        if viewer is None:
            return False
        return question.user_id == viewer.id or viewer.has_role(RoleName.ADMIN.value)

    async def _reload(self, question_id: int) -> Question:
        result = await self.db.execute(
            select(Question)
            .where(Question.id == question_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one()
