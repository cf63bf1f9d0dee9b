"""Profile Service — own profile view, edit and password change.

Invariants:
    - Question/answer counts shown on a profile only include APPROVED content
    - Editing creates the profile row when the account has none
    - Password change requires the current password and the password policy
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import ContentStatus
from doconnect.core.errors import InvalidOperationError
from doconnect.core.password_policy import enforce_password_policy
from doconnect.infrastructure.security import hash_password, verify_password
from doconnect.models.answer import Answer
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.models.user_profile import UserProfile
from doconnect.schemas.profile import (
    ChangePasswordRequest, ProfileResponse, ProfileUpdateRequest,
)

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user: User) -> ProfileResponse:
        question_count = await self._approved_count(Question, user.id)
        answer_count = await self._approved_count(Answer, user.id)
        profile = user.profile
        return ProfileResponse(
            id=user.id,
            user_name=user.user_name,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            bio=profile.bio if profile else None,
            website=profile.website if profile else None,
            location=profile.location if profile else None,
            profile_picture=profile.profile_picture if profile else None,
            reputation=profile.reputation if profile else 0,
            joined_at=profile.joined_at if profile else user.created_at,
            question_count=question_count,
            answer_count=answer_count,
            roles=user.role_names,
        )

    async def update(self, user: User, body: ProfileUpdateRequest) -> ProfileResponse:
        if body.first_name is not None:
            user.first_name = body.first_name
        if body.last_name is not None:
            user.last_name = body.last_name
        user.updated_at = datetime.now(timezone.utc)

        if user.profile is None:
            user.profile = UserProfile(joined_at=user.created_at)
        for field in ("bio", "website", "location"):
            if field in body.model_fields_set:
                setattr(user.profile, field, getattr(body, field))

        await self.db.commit()
        logger.info("Profile updated", extra={"user_id": user.id})
        return await self.get(user)

    async def change_password(self, user: User, body: ChangePasswordRequest) -> None:
        if not verify_password(body.current_password, user.password_hash):
            logger.info("Password change with wrong current password", extra={"user_id": user.id})
            raise InvalidOperationError("Password change failed")
        enforce_password_policy(body.new_password)
        user.password_hash = hash_password(body.new_password)
        user.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("Password changed", extra={"user_id": user.id})

    async def _approved_count(self, model, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(model.id)).where(
                model.user_id == user_id,
                model.status == ContentStatus.APPROVED.value,
            ),
        )
        return result.scalar_one()
