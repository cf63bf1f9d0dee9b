"""Question ORM — moderated user question with attached images.

Invariants:
    - status is a ContentStatus value; new rows start PENDING
    - up_votes/down_votes mirror the votes table (refreshed by VoteService)
    - answer_count is a read-only correlated count (defined in models/answer.py)

Design Decisions:
    - author and images eager-loaded (selectin): every response shows them
    - answers are not a mapped collection; services query them with the status
      filter each endpoint needs
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doconnect.core.domain_types import ContentStatus
from doconnect.db.base import Base, utcnow


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContentStatus.PENDING.value, index=True,
    )
    up_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    down_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")
    images: Mapped[list["Image"]] = relationship(
        "Image",
        primaryjoin="Question.id == Image.question_id",
        order_by="Image.id",
        lazy="selectin",
        viewonly=True,
    )
