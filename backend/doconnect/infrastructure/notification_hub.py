"""Notification Hub — per-user registry of WebSocket connections for real-time pushes.

Invariants:
    - A user may hold several connections (tabs, devices); each receives every push
    - A connection that fails to send is dropped from the registry
    - send_to_user with no open connections is a no-op returning 0

Design Decisions:
    - In-process registry: pushes only reach clients connected to this worker
    - Accepts anything with async send_json, so tests use a recording fake
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class JSONSocket(Protocol):
    async def send_json(self, data: dict) -> None: ...


class NotificationHub:
    """Tracks open notification sockets by user id and fans messages out to them."""

    def __init__(self):
        self.connections: dict[int, set[JSONSocket]] = {}

    def register(self, user_id: int, websocket: JSONSocket) -> None:
        self.connections.setdefault(user_id, set()).add(websocket)
        logger.info(
            f"Notification socket opened for user {user_id} "
            f"({len(self.connections[user_id])} open)",
            extra={"user_id": user_id},
        )

    def unregister(self, user_id: int, websocket: JSONSocket) -> None:
        sockets = self.connections.get(user_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.connections[user_id]
        logger.info(
            f"Notification socket closed for user {user_id}",
            extra={"user_id": user_id},
        )

    async def send_to_user(self, user_id: int, message: dict) -> int:
        """Push message to every socket of the user. Returns how many received it."""
        sockets = self.connections.get(user_id)
        if not sockets:
            return 0

        dead: set[JSONSocket] = set()
        sent = 0
        for websocket in list(sockets):
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                logger.warning(
                    f"Dropping notification socket for user {user_id}: {e}",
                    extra={"user_id": user_id},
                )
                dead.add(websocket)

        for websocket in dead:
            self.unregister(user_id, websocket)
        return sent

    def connection_count(self, user_id: int | None = None) -> int:
        if user_id is not None:
            return len(self.connections.get(user_id, ()))
        return sum(len(s) for s in self.connections.values())


notification_hub = NotificationHub()
