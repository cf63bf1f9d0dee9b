"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden with a DatabaseSessionManager bound to the test engine,
      so route tests see the same error mapping as production
    - Uploads go to tmp_path; pushes go to a per-test NotificationHub
    - Setup and assertions use short-lived sessions from session_factory

Design Decisions:
    - StaticPool: every session shares the one in-memory connection
    - Accounts are inserted directly and tokens signed with the test settings,
      so route tests don't depend on /auth/register
"""

from dataclasses import dataclass
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import doconnect.infrastructure.database as db_module
import doconnect.models  # noqa: F401
from doconnect.api.dependencies import get_notification_hub
from doconnect.config import Settings, get_settings
from doconnect.core.domain_types import ContentStatus, RoleName
from doconnect.db.base import Base
from doconnect.infrastructure.database import DatabaseSessionManager, get_db
from doconnect.infrastructure.notification_hub import NotificationHub
from doconnect.infrastructure.security import create_access_token, hash_password
from doconnect.main import app
from doconnect.models.answer import Answer
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.models.user_profile import UserProfile
from doconnect.services.auth_service import get_or_create_role
from tests.services.fakes import DEFAULT_PASSWORD


@dataclass
class Account:
    user_id: int
    user_name: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-0123456789abcdef-0123",
        upload_dir=tmp_path / "uploads",
        seed_on_startup=False,
    )


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub()


@pytest.fixture
async def client(test_engine, session_factory, test_settings, hub):
    """FastAPI test client with DB, settings and hub overridden."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = session_factory

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_notification_hub] = lambda: hub

    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Data builders ──────────────────────────────────────────────

@pytest.fixture
def make_account(session_factory, test_settings):
    """Insert a user with the given roles and return an Account with a signed token."""

    async def _make(
        user_name: str,
        roles: tuple[str, ...] = (RoleName.USER.value,),
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
    ) -> Account:
        async with session_factory() as db:
            role_rows = [await get_or_create_role(db, name) for name in roles]
            user = User(
                user_name=user_name,
                email=f"{user_name}@example.com",
                first_name=user_name.capitalize(),
                last_name="Tester",
                password_hash=hash_password(password),
                is_active=is_active,
                roles=role_rows,
                profile=UserProfile(),
            )
            db.add(user)
            await db.commit()
            token, _ = create_access_token(
                test_settings,
                user_id=user.id,
                user_name=user.user_name,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                roles=list(roles),
            )
            return Account(user_id=user.id, user_name=user_name, token=token)

    return _make


@pytest.fixture
async def alice(make_account) -> Account:
    return await make_account("alice")


@pytest.fixture
async def bob(make_account) -> Account:
    return await make_account("bob")


@pytest.fixture
async def admin(make_account) -> Account:
    return await make_account("root", roles=(RoleName.ADMIN.value,))


@pytest.fixture
def make_question(session_factory):

    async def _make(
        author: Account,
        status: ContentStatus = ContentStatus.APPROVED,
        title: str = "How do I reverse a list in Python?",
        content: str = "I tried a few things but none of them felt idiomatic.",
        topic: str = "python",
    ) -> int:
        async with session_factory() as db:
            question = Question(
                title=title, content=content, topic=topic,
                status=status.value, user_id=author.user_id,
            )
            db.add(question)
            await db.commit()
            return question.id

    return _make


@pytest.fixture
def make_answer(session_factory):

    async def _make(
        author: Account,
        question_id: int,
        status: ContentStatus = ContentStatus.APPROVED,
        content: str = "Use slicing: items[::-1] returns a reversed copy.",
    ) -> int:
        async with session_factory() as db:
            answer = Answer(
                content=content, status=status.value,
                question_id=question_id, user_id=author.user_id,
            )
            db.add(answer)
            await db.commit()
            return answer.id

    return _make

