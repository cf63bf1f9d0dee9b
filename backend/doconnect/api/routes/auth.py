"""Auth Routes — register, login, current user, logout."""

from fastapi import APIRouter, Depends

from doconnect.api.dependencies import get_auth_service, get_current_user
from doconnect.models.user import User
from doconnect.schemas.auth import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)
from doconnect.schemas.common import MessageResponse
from doconnect.services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(
    body: RegisterRequest, service: AuthService = Depends(get_auth_service),
):
    return await service.register(body)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest, service: AuthService = Depends(get_auth_service),
):
    return await service.login(body)


@router.get("/me", response_model=UserResponse)
async def me(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return await service.me(user.id)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user)):
    """Tokens are stateless; the client drops its copy."""
    return MessageResponse(message="Logged out successfully")
