"""Notification Socket — real-time push channel for a user's notifications.

Connect: ws://host/ws/notifications?token={jwt}

Invariants:
    - The token is checked like a bearer token: valid signature, and the
      account still exists and is active; otherwise the connection is closed
      with code 4001 before accept
    - The database session used for that check is closed before accept
    - After accept the client gets {"type": "connected", "user_id": ...}
    - Text "ping" is answered with "pong"; other client messages are ignored
    - Pushes arrive as {"type": "notification", "data": {...}}
"""

import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from doconnect.api.dependencies import get_notification_hub, load_active_user
from doconnect.config import Settings, get_settings
from doconnect.core.errors import UnauthorizedError
from doconnect.infrastructure import database
from doconnect.infrastructure.notification_hub import NotificationHub

logger = logging.getLogger(__name__)
router = APIRouter(tags=["notifications"])

AUTH_FAILED_CLOSE_CODE = 4001


async def _authenticate(settings: Settings, token: str) -> int:
    if database.db_manager is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    async with database.db_manager.session() as db:
        user = await load_active_user(db, settings, token)
        return user.id


@router.websocket("/ws/notifications")
async def notification_socket(
    websocket: WebSocket,
    token: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    hub: NotificationHub = Depends(get_notification_hub),
):
    try:
        user_id = await _authenticate(settings, token or "")
    except UnauthorizedError as e:
        logger.warning(f"WebSocket auth failed: {e.message}")
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=e.message)
        return

    await websocket.accept()
    hub.register(user_id, websocket)
    try:
        await websocket.send_json({"type": "connected", "user_id": user_id})
        while True:
            data = await websocket.receive_text()
            if data.strip().lower() == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")
    except WebSocketDisconnect:
        logger.info("Notification socket disconnected", extra={"user_id": user_id})
    finally:
        hub.unregister(user_id, websocket)
