"""Content Removal — cascading deletes for questions, answers and whole accounts.

Invariants:
    - Deleting a question removes its answers, all their images and votes
    - Notifications pointing at removed content keep their text; the link is nulled
    - Functions only execute statements; the caller commits, then removes the
      returned file paths from disk

Design Decisions:
    - Explicit bulk statements instead of ORM cascades: no collection has to be
      loaded first and the same code runs on SQLite and PostgreSQL
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.models.answer import Answer
from doconnect.models.image import Image
from doconnect.models.notification import Notification
from doconnect.models.question import Question
from doconnect.models.user import User, user_roles
from doconnect.models.user_profile import UserProfile
from doconnect.models.vote import Vote
from doconnect.services.vote_service import refresh_vote_counters

logger = logging.getLogger(__name__)


async def purge_answers(db: AsyncSession, answer_ids: list[int]) -> list[str]:
    """Delete answers with their images and votes. Returns image file paths."""
    if not answer_ids:
        return []
    result = await db.execute(
        select(Image.file_path).where(Image.answer_id.in_(answer_ids)),
    )
    file_paths = list(result.scalars().all())

    await db.execute(delete(Image).where(Image.answer_id.in_(answer_ids)))
    await db.execute(delete(Vote).where(Vote.answer_id.in_(answer_ids)))
    await db.execute(
        update(Notification)
        .where(Notification.related_answer_id.in_(answer_ids))
        .values(related_answer_id=None)
        .execution_options(synchronize_session=False),
    )
    await db.execute(delete(Answer).where(Answer.id.in_(answer_ids)))
    return file_paths


async def purge_questions(db: AsyncSession, question_ids: list[int]) -> list[str]:
    """Delete questions with their answers, images and votes. Returns image file paths."""
    if not question_ids:
        return []
    result = await db.execute(
        select(Answer.id).where(Answer.question_id.in_(question_ids)),
    )
    file_paths = await purge_answers(db, list(result.scalars().all()))

    result = await db.execute(
        select(Image.file_path).where(Image.question_id.in_(question_ids)),
    )
    file_paths.extend(result.scalars().all())

    await db.execute(delete(Image).where(Image.question_id.in_(question_ids)))
    await db.execute(delete(Vote).where(Vote.question_id.in_(question_ids)))
    await db.execute(
        update(Notification)
        .where(Notification.related_question_id.in_(question_ids))
        .values(related_question_id=None)
        .execution_options(synchronize_session=False),
    )
    await db.execute(delete(Question).where(Question.id.in_(question_ids)))
    return file_paths


async def purge_user(db: AsyncSession, user_id: int) -> list[str]:
    """Delete an account and everything it owns. Returns image file paths."""
    result = await db.execute(select(Question.id).where(Question.user_id == user_id))
    file_paths = await purge_questions(db, list(result.scalars().all()))

    result = await db.execute(select(Answer.id).where(Answer.user_id == user_id))
    file_paths.extend(await purge_answers(db, list(result.scalars().all())))

    # votes the user cast on other people's content
    result = await db.execute(
        select(Vote.question_id, Vote.answer_id).where(Vote.user_id == user_id),
    )
    voted = result.all()
    await db.execute(delete(Vote).where(Vote.user_id == user_id))
    await refresh_vote_counters(
        db,
        question_ids={q for q, _ in voted if q is not None},
        answer_ids={a for _, a in voted if a is not None},
    )

    await db.execute(delete(Notification).where(Notification.user_id == user_id))
    await db.execute(delete(UserProfile).where(UserProfile.user_id == user_id))
    await db.execute(delete(user_roles).where(user_roles.c.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    logger.info(
        f"Purged user {user_id} ({len(file_paths)} stored files)",
        extra={"user_id": user_id},
    )
    return file_paths
