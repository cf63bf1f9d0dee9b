"""Vote ORM — one user's up/down signal on a question or an answer.

Invariants:
    - Exactly one of question_id/answer_id is set (check constraint)
    - A user holds at most one vote per question and one per answer
      (partial unique indexes); a concurrent duplicate insert fails at flush
    - type is +1 (upvote) or -1 (downvote), see core.domain_types.VoteType
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, Integer, SmallInteger, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from doconnect.db.base import Base, utcnow

_QUESTION_TARGET = "question_id IS NOT NULL AND answer_id IS NULL"
_ANSWER_TARGET = "answer_id IS NOT NULL AND question_id IS NULL"


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint(
            f"({_QUESTION_TARGET}) OR ({_ANSWER_TARGET})",
            name="ck_votes_single_target",
        ),
        CheckConstraint("type IN (1, -1)", name="ck_votes_type"),
        Index(
            "ux_votes_user_question", "user_id", "question_id",
            unique=True,
            sqlite_where=text(_QUESTION_TARGET),
            postgresql_where=text(_QUESTION_TARGET),
        ),
        Index(
            "ux_votes_user_answer", "user_id", "answer_id",
            unique=True,
            sqlite_where=text(_ANSWER_TARGET),
            postgresql_where=text(_ANSWER_TARGET),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    question_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    answer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("answers.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
