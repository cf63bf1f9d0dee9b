"""Image ORM — metadata for an uploaded file attached to a question or an answer.

Invariants:
    - file_name is the stored (sanitized, de-duplicated) name, unique on disk
    - At most one of question_id/answer_id is set
    - Row deletion does not touch disk; services remove the file afterwards
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from doconnect.db.base import Base, utcnow


class Image(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    question_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    answer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("answers.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )

    @property
    def url(self) -> str:
        return f"/api/v1/files/{self.file_name}"
