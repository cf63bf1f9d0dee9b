"""Notification Hub — tests for per-user socket registry and fan-out."""

from doconnect.infrastructure.notification_hub import NotificationHub
from tests.services.fakes import RecordingSocket


async def test_send_without_connections_is_noop():
    hub = NotificationHub()
    assert await hub.send_to_user(1, {"type": "notification"}) == 0


async def test_send_reaches_every_socket_of_user():
    hub = NotificationHub()
    tab, phone, other = RecordingSocket(), RecordingSocket(), RecordingSocket()
    hub.register(1, tab)
    hub.register(1, phone)
    hub.register(2, other)

    sent = await hub.send_to_user(1, {"type": "notification", "data": {"id": 5}})

    assert sent == 2
    assert tab.sent == phone.sent == [{"type": "notification", "data": {"id": 5}}]
    assert other.sent == []


async def test_failing_socket_is_dropped():
    hub = NotificationHub()
    good, broken = RecordingSocket(), RecordingSocket(fail=True)
    hub.register(1, good)
    hub.register(1, broken)

    assert await hub.send_to_user(1, {"type": "notification"}) == 1
    assert hub.connection_count(1) == 1


def test_unregister_last_socket_forgets_user():
    hub = NotificationHub()
    socket = RecordingSocket()
    hub.register(3, socket)
    hub.unregister(3, socket)
    assert hub.connection_count(3) == 0
    assert 3 not in hub.connections


def test_unregister_unknown_user_is_harmless():
    NotificationHub().unregister(99, RecordingSocket())


def test_connection_count_totals():
    hub = NotificationHub()
    hub.register(1, RecordingSocket())
    hub.register(2, RecordingSocket())
    hub.register(2, RecordingSocket())
    assert hub.connection_count() == 3
