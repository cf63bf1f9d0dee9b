"""Async engine and per-request sessions for DoConnect.

Invariants:
    - A session that raises is rolled back and closed before the error escapes
    - SQLAlchemy failures leave this module as DatabaseError (503); any other
      exception (domain errors included) propagates unchanged
    - SQLite URLs get the dialect's default pool; server databases get a
      sized, pre-pinged, recycled pool

Design Decisions:
    - The module-level db_manager is set by init_db() from the app lifespan,
      never at import time
    - expire_on_commit=False: services return ORM objects after commit
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from doconnect.core.errors import DatabaseError
from doconnect.db.base import Base

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors.
_FAILURE_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "constraint violated", "commit"),
    (OperationalError, "connection lost or refused", "execute"),
    (DBAPIError, "driver rejected the statement", "query"),
    (SQLAlchemyError, "unexpected ORM failure", "unknown"),
)


def translate_db_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _FAILURE_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError(str(exc), "unknown")


def _engine_for(url: str, pool_size: int, max_overflow: int) -> AsyncEngine:
    if url.startswith("sqlite"):
        return create_async_engine(url, pool_pre_ping=True)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
    )


class DatabaseSessionManager:
    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = _engine_for(database_url, pool_size, max_overflow)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            await session.rollback()
            error = translate_db_error(exc)
            logger.error(
                f"Session rolled back: {exc}",
                extra={"error_code": error.code},
            )
            raise error from exc
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create any missing table. Used when Alembic is not run (dev, tests)."""
        import doconnect.models  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Database unreachable: {exc}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session dependency."""
    if db_manager is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    async with db_manager.session() as session:
        yield session
