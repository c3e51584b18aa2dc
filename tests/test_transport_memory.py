"""Tests for InMemoryPresenceTransport."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import pytest

from hostkit.models.enums import PresenceEventType
from hostkit.transport.base import BroadcastMessage, PresenceChange
from hostkit.transport.memory import InMemoryPresenceTransport

Advance = Callable[[], Awaitable[None]]


class _Listener:
    def __init__(self) -> None:
        self.changes: list[PresenceChange] = []

    async def __call__(self, change: PresenceChange) -> None:
        self.changes.append(change)


class TestMembership:
    async def test_join_notifies_listener(self, transport: InMemoryPresenceTransport) -> None:
        listener = _Listener()
        transport.attach(listener)

        member = await transport.join("presence-room-ABCD", "A", {"displayName": "Alice"})

        assert member.user_id == "A"
        assert len(listener.changes) == 1
        change = listener.changes[0]
        assert change.type == PresenceEventType.MEMBER_ADDED
        assert change.channel == "presence-room-ABCD"
        assert change.member.user_info == {"displayName": "Alice"}

    async def test_leave_notifies_listener(self, transport: InMemoryPresenceTransport) -> None:
        listener = _Listener()
        transport.attach(listener)
        await transport.join("presence-room-ABCD", "A")

        assert await transport.leave("presence-room-ABCD", "A") is True
        assert listener.changes[-1].type == PresenceEventType.MEMBER_REMOVED
        assert await transport.members("presence-room-ABCD") == []
        assert await transport.is_occupied("presence-room-ABCD") is False

    async def test_leave_unknown(self, transport: InMemoryPresenceTransport) -> None:
        listener = _Listener()
        transport.attach(listener)
        assert await transport.leave("presence-room-ABCD", "A") is False
        assert listener.changes == []

    async def test_rejoin_replaces_info(self, transport: InMemoryPresenceTransport) -> None:
        await transport.join("presence-room-ABCD", "A", {"displayName": "Alice"})
        await transport.join("presence-room-ABCD", "A", {"displayName": "Al"})

        members = await transport.members("presence-room-ABCD")
        assert len(members) == 1
        assert members[0].user_info == {"displayName": "Al"}

    async def test_listener_error_is_logged(
        self, transport: InMemoryPresenceTransport, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def broken(change: PresenceChange) -> None:
            raise RuntimeError("boom")

        transport.attach(broken)
        with caplog.at_level("ERROR", logger="hostkit.transport"):
            await transport.join("presence-room-ABCD", "A")

        assert "Presence listener failed" in caplog.text
        assert await transport.is_occupied("presence-room-ABCD") is True


class TestBroadcast:
    async def test_records_published(self, transport: InMemoryPresenceTransport) -> None:
        await transport.broadcast("ch1", "host:promoted", {"newHostSessionId": "B"})
        await transport.broadcast("ch2", "room:closed", {})

        assert len(transport.published) == 2
        assert [m.name for m in transport.published_on("ch1")] == ["host:promoted"]
        assert transport.published_on("ch1", "room:closed") == []

    async def test_subscribers_receive_in_order(
        self, transport: InMemoryPresenceTransport, advance: Advance
    ) -> None:
        received: list[BroadcastMessage] = []

        async def callback(message: BroadcastMessage) -> None:
            received.append(message)

        await transport.subscribe("ch1", callback)
        await transport.broadcast("ch1", "host:promoted", {"n": 1})
        await transport.broadcast("ch1", "room:closed", {"n": 2})
        await transport.broadcast("other", "room:closed", {"n": 3})
        await advance()

        assert [m.payload["n"] for m in received] == [1, 2]

    async def test_unsubscribe(
        self, transport: InMemoryPresenceTransport, advance: Advance
    ) -> None:
        received: list[BroadcastMessage] = []

        async def callback(message: BroadcastMessage) -> None:
            received.append(message)

        sub_id = await transport.subscribe("ch1", callback)
        assert transport.subscription_count == 1
        assert await transport.unsubscribe(sub_id) is True
        assert await transport.unsubscribe(sub_id) is False

        await transport.broadcast("ch1", "room:closed", {})
        await advance()
        assert received == []
        assert transport.subscription_count == 0

    async def test_queue_drops_oldest(self, advance: Advance) -> None:
        transport = InMemoryPresenceTransport(max_queue_size=2)
        received: list[int] = []

        async def callback(message: BroadcastMessage) -> None:
            received.append(message.payload["n"])

        await transport.subscribe("ch1", callback)
        for n in range(5):
            await transport.broadcast("ch1", "tick", {"n": n})
        await advance()

        assert received == [3, 4]
        await transport.close()

    async def test_callback_error_does_not_stop_delivery(
        self, transport: InMemoryPresenceTransport, advance: Advance
    ) -> None:
        received: list[int] = []

        async def callback(message: BroadcastMessage) -> None:
            if message.payload["n"] == 0:
                raise RuntimeError("boom")
            received.append(message.payload["n"])

        await transport.subscribe("ch1", callback)
        await transport.broadcast("ch1", "tick", {"n": 0})
        await transport.broadcast("ch1", "tick", {"n": 1})
        await advance()

        assert received == [1]

    async def test_closed_transport_drops_everything(
        self, transport: InMemoryPresenceTransport
    ) -> None:
        listener = _Listener()
        transport.attach(listener)
        await transport.close()

        await transport.broadcast("ch1", "room:closed", {})
        await transport.join("presence-room-ABCD", "A")

        assert transport.published == []
        assert listener.changes == []


class TestBroadcastMessage:
    def test_dict_round_trip(self) -> None:
        message = BroadcastMessage(channel="ch1", name="room:closed", payload={"roomId": "ABCD"})
        restored = BroadcastMessage.from_dict(message.to_dict())
        assert restored == message
