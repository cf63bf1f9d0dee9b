"""Declarative Base — metadata shared by every DoConnect table.

Invariants:
    - Every model inherits from Base, so Base.metadata describes the full schema
      (Alembic autogenerate and create_all both read it)
    - Unnamed indexes, unique constraints and foreign keys get deterministic
      names from NAMING_CONVENTION
    - Timestamps are written as timezone-aware UTC (utcnow)
"""

from datetime import datetime, timezone

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
