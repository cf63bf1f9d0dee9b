"""Auth Service — registration, login and the current-user lookup.

Invariants:
    - Email uniqueness is checked before user name uniqueness
    - Unknown user and wrong password give the same "Invalid credentials"
    - A deactivated account cannot log in, even with the right password
    - Every registered user gets the User role and an empty profile
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.config import Settings
from doconnect.core.domain_types import RoleName
from doconnect.core.errors import (
    InvalidOperationError, ResourceNotFoundError, UnauthorizedError,
)
from doconnect.core.password_policy import (
    enforce_password_policy, enforce_user_name_rules,
)
from doconnect.infrastructure.security import (
    create_access_token, hash_password, verify_password,
)
from doconnect.models.user import Role, User
from doconnect.models.user_profile import UserProfile
from doconnect.schemas.auth import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)

logger = logging.getLogger(__name__)


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        user_name=user.user_name,
        roles=user.role_names,
    )


async def get_or_create_role(db: AsyncSession, name: str) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalar_one_or_none()
    if role is None:
        role = Role(name=name)
        db.add(role)
        await db.flush()
        logger.info(f"Created role {name}")
    return role


class AuthService:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def register(self, body: RegisterRequest) -> AuthResponse:
        email = body.email.strip().lower()
        if await self._exists(func.lower(User.email) == email):
            raise InvalidOperationError("Email already exists")
        if await self._exists(func.lower(User.user_name) == body.user_name.lower()):
            raise InvalidOperationError("Username already exists")
        enforce_user_name_rules(body.user_name)
        enforce_password_policy(body.password)

        role = await get_or_create_role(self.db, RoleName.USER.value)
        user = User(
            first_name=body.first_name.strip(),
            last_name=body.last_name.strip(),
            email=email,
            user_name=body.user_name,
            password_hash=hash_password(body.password),
            is_active=True,
            roles=[role],
            profile=UserProfile(),
        )
        self.db.add(user)
        await self.db.commit()

        logger.info(f"User registered: {user.user_name}", extra={"user_id": user.id})
        return self._auth_response(user)

    async def login(self, body: LoginRequest) -> AuthResponse:
        result = await self.db.execute(
            select(User).where(func.lower(User.user_name) == body.user_name.strip().lower()),
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(body.password, user.password_hash):
            logger.info(f"Failed login for {body.user_name!r}")
            raise UnauthorizedError("Invalid credentials")
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        logger.info("User logged in", extra={"user_id": user.id})
        return self._auth_response(user)

    async def me(self, user_id: int) -> UserResponse:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user_response(user)

    def _auth_response(self, user: User) -> AuthResponse:
        token, expiration = create_access_token(
            self.settings,
            user_id=user.id,
            user_name=user.user_name,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=user.role_names,
        )
        return AuthResponse(token=token, expiration=expiration, user=user_response(user))

    async def _exists(self, criterion) -> bool:
        result = await self.db.execute(select(User.id).where(criterion).limit(1))
        return result.first() is not None
