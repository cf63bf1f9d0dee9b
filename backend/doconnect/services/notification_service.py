"""Notification Service — persists user notifications and pushes them over WebSocket.

Invariants:
    - notify_user only adds + flushes; the caller's commit makes it durable
    - Pushes are queued and sent by deliver(), called after the caller commits,
      so a rolled-back notification is never pushed
    - Push payload: {"type": "notification", "data": NotificationResponse}
    - Users only read or mark their own notifications (others look like 404)
"""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import NotificationType, RoleName
from doconnect.core.errors import ResourceNotFoundError
from doconnect.core.pagination import normalize_page, page_offset
from doconnect.infrastructure.notification_hub import NotificationHub, notification_hub
from doconnect.models.notification import Notification
from doconnect.models.user import Role, User, user_roles
from doconnect.schemas.notification import (
    NotificationListResponse, NotificationResponse,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Inbox operations plus real-time fan-out through the notification hub."""

    def __init__(self, db: AsyncSession, hub: NotificationHub = notification_hub):
        self.db = db
        self.hub = hub
        self._outbox: list[Notification] = []

    async def notify_user(
        self,
        user_id: int,
        title: str,
        message: str,
        notification_type: NotificationType,
        related_question_id: int | None = None,
        related_answer_id: int | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title[:200],
            message=message[:1000],
            type=notification_type.value,
            is_read=False,
            related_question_id=related_question_id,
            related_answer_id=related_answer_id,
        )
        self.db.add(notification)
        await self.db.flush()
        self._outbox.append(notification)
        return notification

    async def notify_admins(
        self,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.CONTENT_PENDING,
        related_question_id: int | None = None,
        related_answer_id: int | None = None,
        exclude_user_id: int | None = None,
    ) -> int:
        """Notify every active admin. Returns how many were notified."""
        result = await self.db.execute(
            select(User.id)
            .join(user_roles, user_roles.c.user_id == User.id)
            .join(Role, Role.id == user_roles.c.role_id)
            .where(Role.name == RoleName.ADMIN.value, User.is_active.is_(True)),
        )
        admin_ids = [
            uid for uid in result.scalars().all() if uid != exclude_user_id
        ]
        for admin_id in admin_ids:
            await self.notify_user(
                admin_id, title, message, notification_type,
                related_question_id, related_answer_id,
            )
        return len(admin_ids)

    async def deliver(self) -> int:
        """Push queued notifications to connected sockets. Returns sockets reached."""
        outbox, self._outbox = self._outbox, []
        reached = 0
        for notification in outbox:
            payload = {
                "type": "notification",
                "data": NotificationResponse.model_validate(
                    notification,
                ).model_dump(mode="json"),
            }
            reached += await self.hub.send_to_user(notification.user_id, payload)
        if outbox:
            logger.debug(
                f"Delivered {len(outbox)} notifications to {reached} sockets",
            )
        return reached

    async def list_for_user(
        self, user_id: int, page: int = 1, page_size: int = 10,
    ) -> NotificationListResponse:
        page, page_size = normalize_page(page, page_size)
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size),
        )
        return NotificationListResponse(
            notifications=[
                NotificationResponse.model_validate(n)
                for n in result.scalars().all()
            ],
            page=page,
            page_size=page_size,
            unread_count=await self.unread_count(user_id),
        )

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            ),
        )
        return result.scalar_one()

    async def mark_read(self, user_id: int, notification_id: int) -> None:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            ),
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise ResourceNotFoundError("Notification", notification_id)
        notification.is_read = True
        await self.db.commit()

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        logger.info(
            f"Marked {result.rowcount} notifications read",
            extra={"user_id": user_id},
        )
        return result.rowcount
