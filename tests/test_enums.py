"""Tests for all string enums."""

from __future__ import annotations

import pytest

from hostkit.models.enums import (
    BroadcastType,
    CloseReason,
    ParticipantRole,
    ParticipantStatus,
    PresenceEventType,
    RoomState,
)


class TestParticipantRole:
    def test_members(self) -> None:
        assert ParticipantRole.HOST == "host"
        assert ParticipantRole.GUEST == "guest"

    def test_count(self) -> None:
        assert len(ParticipantRole) == 2


class TestParticipantStatus:
    def test_members(self) -> None:
        assert ParticipantStatus.CONNECTED == "connected"
        assert ParticipantStatus.RECONNECTING == "reconnecting"
        assert ParticipantStatus.DISCONNECTED == "disconnected"


class TestBroadcastType:
    def test_wire_names(self) -> None:
        assert BroadcastType.HOST_PROMOTED == "host:promoted"
        assert BroadcastType.ROOM_CLOSED == "room:closed"
        assert BroadcastType.ROOM_CREATED == "room:created"

    def test_str(self) -> None:
        assert f"{BroadcastType.ROOM_CLOSED}" == "room:closed"


@pytest.mark.parametrize(
    ("enum_cls", "value"),
    [
        (RoomState, "closed"),
        (CloseReason, "host_request"),
        (PresenceEventType, "member_removed"),
    ],
)
def test_lookup_by_value(enum_cls: type, value: str) -> None:
    assert enum_cls(value) == value
