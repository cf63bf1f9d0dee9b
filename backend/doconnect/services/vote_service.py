"""Vote Service — toggles a user's vote and keeps the denormalized counters in sync.

Invariants:
    - Exactly one target per vote; the target must exist and be approved
    - insert / flip / remove decided by core.enforce_votes.decide_vote_action
    - up_votes/down_votes on the target are recounted from the votes table on
      every change, never incremented in place
    - Only a newly inserted vote on someone else's content notifies the owner
    - A concurrent duplicate insert trips the unique index and surfaces as
      DatabaseError (infrastructure/database.py)
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import (
    ContentStatus, NotificationType, VoteAction, VoteType,
)
from doconnect.core.enforce_moderation import excerpt
from doconnect.core.enforce_votes import (
    compute_vote_stats, decide_vote_action, validate_vote_target,
)
from doconnect.core.errors import InvalidOperationError, ResourceNotFoundError
from doconnect.models.answer import Answer
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.models.vote import Vote
from doconnect.schemas.vote import VoteRequest, VoteStats
from doconnect.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


async def refresh_vote_counters(
    db: AsyncSession,
    question_ids: Iterable[int] = (),
    answer_ids: Iterable[int] = (),
) -> None:
    """Recount up/down votes for the given targets and store them on the rows."""
    for model, column, ids in (
        (Question, Vote.question_id, set(question_ids)),
        (Answer, Vote.answer_id, set(answer_ids)),
    ):
        if not ids:
            continue
        result = await db.execute(
            select(column, Vote.type, func.count(Vote.id))
            .where(column.in_(ids))
            .group_by(column, Vote.type),
        )
        tallies = {target_id: {"up_votes": 0, "down_votes": 0} for target_id in ids}
        for target_id, vote_type, count in result.all():
            key = "up_votes" if vote_type == VoteType.UPVOTE else "down_votes"
            tallies[target_id][key] = count
        for target_id, counts in tallies.items():
            await db.execute(
                update(model).where(model.id == target_id).values(**counts),
            )


class VoteService:
    def __init__(self, db: AsyncSession, notifications: NotificationService):
        self.db = db
        self.notifications = notifications

    async def cast(self, actor: User, body: VoteRequest) -> VoteStats:
        validate_vote_target(body.question_id, body.answer_id)
        target = await self._load_target(body.question_id, body.answer_id)
        if target.status != ContentStatus.APPROVED.value:
            raise InvalidOperationError("Only approved content can be voted on")

        existing = await self._find_vote(actor.id, body.question_id, body.answer_id)
        action = decide_vote_action(
            VoteType(existing.type) if existing else None, body.type,
        )
        if action == VoteAction.INSERT:
            self.db.add(Vote(
                user_id=actor.id,
                question_id=body.question_id,
                answer_id=body.answer_id,
                type=body.type.value,
            ))
        elif action == VoteAction.FLIP:
            existing.type = body.type.value
        else:
            await self.db.delete(existing)
        await self.db.flush()

        await refresh_vote_counters(
            self.db,
            question_ids=[body.question_id] if body.question_id else [],
            answer_ids=[body.answer_id] if body.answer_id else [],
        )

        if action == VoteAction.INSERT and target.user_id != actor.id:
            await self._notify_owner(actor, target, body.type)

        await self.db.commit()
        await self.notifications.deliver()
        logger.info(
            f"Vote {action.value} ({body.type.name.lower()})",
            extra={
                "user_id": actor.id,
                "question_id": body.question_id,
                "answer_id": body.answer_id,
            },
        )
        return await self.stats(body.question_id, body.answer_id, actor.id)

    async def stats(
        self,
        question_id: int | None,
        answer_id: int | None,
        viewer_id: int | None = None,
    ) -> VoteStats:
        validate_vote_target(question_id, answer_id)
        await self._load_target(question_id, answer_id)
        if question_id is not None:
            criteria = Vote.question_id == question_id
        else:
            criteria = Vote.answer_id == answer_id
        result = await self.db.execute(select(Vote.user_id, Vote.type).where(criteria))
        votes = [(user_id, VoteType(t)) for user_id, t in result.all()]
        return VoteStats(**compute_vote_stats(votes, viewer_id))

    async def _load_target(
        self, question_id: int | None, answer_id: int | None,
    ) -> Question | Answer:
        if question_id is not None:
            target = await self.db.get(Question, question_id)
            if target is None:
                raise ResourceNotFoundError("Question", question_id)
            return target
        target = await self.db.get(Answer, answer_id)
        if target is None:
            raise ResourceNotFoundError("Answer", answer_id)
        return target

    async def _find_vote(
        self, user_id: int, question_id: int | None, answer_id: int | None,
    ) -> Vote | None:
        query = select(Vote).where(Vote.user_id == user_id)
        if question_id is not None:
            query = query.where(Vote.question_id == question_id, Vote.answer_id.is_(None))
        else:
            query = query.where(Vote.answer_id == answer_id, Vote.question_id.is_(None))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _notify_owner(
        self, actor: User, target: Question | Answer, vote_type: VoteType,
    ) -> None:
        verb = "upvoted" if vote_type == VoteType.UPVOTE else "downvoted"
        if isinstance(target, Question):
            await self.notifications.notify_user(
                target.user_id,
                "New Vote",
                f"{actor.user_name} {verb} your question '{target.title}'.",
                NotificationType.QUESTION_VOTE,
                related_question_id=target.id,
            )
        else:
            await self.notifications.notify_user(
                target.user_id,
                "New Vote",
                f"{actor.user_name} {verb} your answer '{excerpt(target.content)}'.",
                NotificationType.ANSWER_VOTE,
                related_question_id=target.question_id,
                related_answer_id=target.id,
            )
