"""User & Role ORM — accounts, credentials and role membership.

Invariants:
    - user_name and email are unique; email stored lower-cased
    - password_hash only ever holds a passlib hash (infrastructure/security.py)
    - is_active=False blocks login but keeps the account's content
    - roles loaded eagerly: every authorization check needs them

Design Decisions:
    - Role as its own table with a user_roles association, so an admin can
      grant/revoke roles without a schema change
"""

from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doconnect.db.base import Base, utcnow


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id", Integer,
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "role_id", Integer,
        ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class User(Base):
    """Registered account."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_name: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True, index=True,
    )
    email: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True, index=True,
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    roles: Mapped[list[Role]] = relationship(
        Role, secondary=user_roles, lazy="selectin",
    )
    profile: Mapped["UserProfile"] = relationship(
        "UserProfile", back_populates="user", uselist=False, lazy="selectin",
    )

    @property
    def role_names(self) -> list[str]:
        return sorted(r.name for r in self.roles)

    def has_role(self, name: str) -> bool:
        return any(r.name == name for r in self.roles)
