"""Request Dependencies — authentication and per-request service wiring.

Invariants:
    - get_current_user re-reads the account on every request: a deactivated or
      deleted user is rejected even while their token is still unexpired
    - Anonymous endpoints use get_current_user_optional, which treats a bad
      token like no token
    - require_admin checks roles from the database, not from token claims
    - One NotificationService per request, shared by every service built for it

Design Decisions:
    - Services constructed through Depends so tests swap storage, hub or
      settings with app.dependency_overrides
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.config import Settings, get_settings
from doconnect.core.domain_types import RoleName
from doconnect.core.errors import ForbiddenError, UnauthorizedError
from doconnect.infrastructure.database import get_db
from doconnect.infrastructure.file_storage import LocalFileStorage
from doconnect.infrastructure.notification_hub import NotificationHub, notification_hub
from doconnect.infrastructure.security import decode_access_token
from doconnect.models.user import User
from doconnect.services.admin_service import AdminService
from doconnect.services.answer_service import AnswerService
from doconnect.services.auth_service import AuthService
from doconnect.services.file_service import FileService
from doconnect.services.notification_service import NotificationService
from doconnect.services.profile_service import ProfileService
from doconnect.services.question_service import QuestionService
from doconnect.services.vote_service import VoteService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# ─── Authentication ─────────────────────────────────────────────

async def load_active_user(db: AsyncSession, settings: Settings, token: str) -> User:
    """Decode a bearer token and return its account, which must exist and be active."""
    claims = decode_access_token(settings, token)
    user = await db.get(User, claims.user_id)
    if user is None:
        raise UnauthorizedError("Invalid user token")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    return await load_active_user(db, settings, credentials.credentials)


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User | None:
    if credentials is None:
        return None
    try:
        return await load_active_user(db, settings, credentials.credentials)
    except UnauthorizedError as e:
        logger.debug(f"Ignoring unusable token on anonymous endpoint: {e.message}")
        return None


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.has_role(RoleName.ADMIN.value):
        raise ForbiddenError("Admin role required")
    return user


# ─── Infrastructure providers ───────────────────────────────────

def get_file_storage(settings: Settings = Depends(get_settings)) -> LocalFileStorage:
    return LocalFileStorage(settings.upload_dir)


def get_notification_hub() -> NotificationHub:
    return notification_hub


# ─── Service providers ──────────────────────────────────────────

def get_notification_service(
    db: AsyncSession = Depends(get_db),
    hub: NotificationHub = Depends(get_notification_hub),
) -> NotificationService:
    return NotificationService(db, hub)


def get_file_service(
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    settings: Settings = Depends(get_settings),
) -> FileService:
    return FileService(
        db, storage,
        max_file_size=settings.max_upload_size_bytes,
        allowed_extensions=settings.allowed_image_extensions,
    )


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


def get_question_service(
    db: AsyncSession = Depends(get_db),
    files: FileService = Depends(get_file_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> QuestionService:
    return QuestionService(db, files, notifications)


def get_answer_service(
    db: AsyncSession = Depends(get_db),
    files: FileService = Depends(get_file_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> AnswerService:
    return AnswerService(db, files, notifications)


def get_vote_service(
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> VoteService:
    return VoteService(db, notifications)


def get_admin_service(
    db: AsyncSession = Depends(get_db),
    files: FileService = Depends(get_file_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> AdminService:
    return AdminService(db, files, notifications)


def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)
