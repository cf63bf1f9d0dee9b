"""Answer ORM — moderated reply to a question.

Invariants:
    - Always belongs to a Question and a User
    - status is a ContentStatus value; new and edited rows are PENDING

Design Decisions:
    - question relationship is lazy="raise": callers that need it ask for it
      with selectinload, so no implicit IO happens in async code
    - Question.answer_count is attached here, once both tables are mapped
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func, select
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from doconnect.core.domain_types import ContentStatus
from doconnect.db.base import Base, utcnow
from doconnect.models.question import Question


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContentStatus.PENDING.value, index=True,
    )
    up_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    down_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")
    question: Mapped[Question] = relationship(Question, lazy="raise")
    images: Mapped[list["Image"]] = relationship(
        "Image",
        primaryjoin="Answer.id == Image.answer_id",
        order_by="Image.id",
        lazy="selectin",
        viewonly=True,
    )


# all answers regardless of status; list views show it next to vote counts
Question.answer_count = column_property(
    select(func.count(Answer.id))
    .where(Answer.question_id == Question.id)
    .correlate_except(Answer)
    .scalar_subquery()
)
