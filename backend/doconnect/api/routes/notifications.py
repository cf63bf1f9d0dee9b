"""Notification Routes — the caller's inbox and read-state changes."""

from fastapi import APIRouter, Depends, Query

from doconnect.api.dependencies import get_current_user, get_notification_service
from doconnect.models.user import User
from doconnect.schemas.common import MessageResponse
from doconnect.schemas.notification import (
    MarkAllReadResponse, NotificationListResponse, UnreadCountResponse,
)
from doconnect.services.notification_service import NotificationService

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1),
    page_size: int = Query(10),
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.list_for_user(user.id, page, page_size)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountResponse(unread_count=await service.unread_count(user.id))


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = await service.mark_all_read(user.id)
    return MarkAllReadResponse(
        message="All notifications marked as read", updated=updated,
    )


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.mark_read(user.id, notification_id)
    return MessageResponse(message="Notification marked as read")
