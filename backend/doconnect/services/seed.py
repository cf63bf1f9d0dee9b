"""Startup Seeding — built-in roles and the bootstrap admin account.

Invariants:
    - Idempotent: running it again changes nothing
    - An existing account with the admin email is left untouched, except that
      it is guaranteed the Admin role
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.config import Settings
from doconnect.core.domain_types import RoleName
from doconnect.infrastructure.security import hash_password
from doconnect.models.user import User
from doconnect.models.user_profile import UserProfile
from doconnect.services.auth_service import get_or_create_role

logger = logging.getLogger(__name__)


async def seed_database(db: AsyncSession, settings: Settings) -> User:
    """Ensure roles Admin and User exist and an admin account is present."""
    roles = {
        name.value: await get_or_create_role(db, name.value) for name in RoleName
    }

    result = await db.execute(
        select(User).where(User.email == settings.admin_email.lower()),
    )
    admin = result.scalar_one_or_none()
    if admin is None:
        admin = User(
            user_name=settings.admin_user_name,
            email=settings.admin_email.lower(),
            first_name="Admin",
            last_name="User",
            password_hash=hash_password(settings.admin_password),
            is_active=True,
            roles=[roles[RoleName.ADMIN.value]],
            profile=UserProfile(),
        )
        db.add(admin)
        logger.info(f"Seeded admin account {settings.admin_user_name!r}")
    elif not admin.has_role(RoleName.ADMIN.value):
        admin.roles.append(roles[RoleName.ADMIN.value])
        logger.info("Granted Admin role to existing admin account", extra={"user_id": admin.id})

    await db.commit()
    return admin
