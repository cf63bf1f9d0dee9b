"""Profile Routes — the caller's own profile and password."""

from fastapi import APIRouter, Depends

from doconnect.api.dependencies import get_current_user, get_profile_service
from doconnect.models.user import User
from doconnect.schemas.common import MessageResponse
from doconnect.schemas.profile import (
    ChangePasswordRequest, ProfileResponse, ProfileUpdateRequest,
)
from doconnect.services.profile_service import ProfileService

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.get(user)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.update(user, body)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    await service.change_password(user, body)
    return MessageResponse(message="Password changed successfully")
