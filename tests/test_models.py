"""Tests for all Pydantic data models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import TypeAdapter, ValidationError

from hostkit.models import (
    Broadcast,
    BroadcastType,
    CloseReason,
    ExplicitCloseRequested,
    GraceExpired,
    HostPromoted,
    Participant,
    ParticipantJoined,
    ParticipantLeft,
    ParticipantRole,
    ParticipantStatus,
    Room,
    RoomClosed,
    RoomCommand,
    RoomCreated,
    RoomState,
)
from hostkit.models.room import (
    channel_name,
    is_valid_display_name,
    is_valid_room_id,
    room_id_from_channel,
)
from tests.conftest import T0


class TestParticipant:
    def test_defaults(self) -> None:
        p = Participant(session_id="A", display_name="Alice")
        assert p.role == ParticipantRole.GUEST
        assert p.status == ParticipantStatus.CONNECTED
        assert p.connected_at.tzinfo is not None
        assert not p.is_host

    def test_display_name_trimmed(self) -> None:
        p = Participant(session_id="A", display_name="  Alice  ")
        assert p.display_name == "Alice"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 65])
    def test_display_name_bounds(self, name: str) -> None:
        with pytest.raises(ValidationError):
            Participant(session_id="A", display_name=name)

    def test_empty_session_id(self) -> None:
        with pytest.raises(ValidationError):
            Participant(session_id="", display_name="Alice")

    def test_naive_connected_at_becomes_utc(self) -> None:
        p = Participant(session_id="A", display_name="a", connected_at=datetime(2024, 1, 1))
        assert p.connected_at == T0

    def test_presence_info_round_trip(self) -> None:
        p = Participant(
            session_id="A",
            display_name="Alice",
            role=ParticipantRole.HOST,
            connected_at=T0,
        )
        info = p.to_presence_info()
        assert info == {
            "sessionId": "A",
            "displayName": "Alice",
            "role": "host",
            "connectedAt": T0.isoformat(),
            "status": "connected",
        }
        assert Participant.from_presence_info(info) == p

    def test_from_presence_info_prefers_transport_id(self) -> None:
        p = Participant.from_presence_info(
            {"sessionId": "stale", "displayName": "Bob"}, session_id="1.2"
        )
        assert p.session_id == "1.2"
        assert p.role == ParticipantRole.GUEST

    def test_from_presence_info_invalid(self) -> None:
        with pytest.raises(ValidationError):
            Participant.from_presence_info({"displayName": "Bob", "role": "admin"}, session_id="1")


class TestRoom:
    def test_defaults(self) -> None:
        room = Room(id="ABCD")
        assert room.state == RoomState.OPEN
        assert not room.is_closed
        assert room.member_count == 0

    @pytest.mark.parametrize("room_id", ["abc", "ABCDEFGHIJKLM", "AB-CD", ""])
    def test_invalid_id(self, room_id: str) -> None:
        with pytest.raises(ValidationError):
            Room(id=room_id)

    def test_closed(self) -> None:
        room = Room(id="ABCD", state=RoomState.CLOSED, closed_at=T0)
        assert room.is_closed


class TestRoomHelpers:
    @pytest.mark.parametrize(
        ("room_id", "valid"),
        [
            ("ABCD", True),
            ("abc123XYZ000", True),
            ("abc", False),
            ("ABCD!", False),
            ("ABCD\n", False),
        ],
    )
    def test_is_valid_room_id(self, room_id: str, valid: bool) -> None:
        assert is_valid_room_id(room_id) is valid

    def test_is_valid_display_name(self) -> None:
        assert is_valid_display_name(" Al ")
        assert not is_valid_display_name("   ")
        assert not is_valid_display_name("x" * 65)

    def test_channel_mapping(self) -> None:
        assert channel_name("ABCD") == "presence-room-ABCD"
        assert room_id_from_channel("presence-room-ABCD") == "ABCD"
        assert room_id_from_channel("presence-room-AB") is None
        assert room_id_from_channel("private-room-ABCD") is None
        assert room_id_from_channel("presence-room-ABCD\n") is None
        assert room_id_from_channel("game-ABCD", prefix="game-") == "ABCD"


class TestCommands:
    def test_discriminated_parse(self) -> None:
        adapter: TypeAdapter[RoomCommand] = TypeAdapter(RoomCommand)
        assert isinstance(
            adapter.validate_python({"type": "participant_left", "session_id": "A"}),
            ParticipantLeft,
        )
        assert isinstance(
            adapter.validate_python({"type": "grace_expired", "session_id": "A"}), GraceExpired
        )
        assert isinstance(
            adapter.validate_python(
                {"type": "explicit_close_requested", "requester_session_id": "A"}
            ),
            ExplicitCloseRequested,
        )
        joined = adapter.validate_python(
            {
                "type": "participant_joined",
                "participant": {"session_id": "A", "display_name": "Alice"},
            }
        )
        assert isinstance(joined, ParticipantJoined)
        assert joined.participant.session_id == "A"

    def test_unknown_type(self) -> None:
        adapter: TypeAdapter[RoomCommand] = TypeAdapter(RoomCommand)
        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "kick", "session_id": "A"})


class TestBroadcasts:
    def test_host_promoted(self) -> None:
        b = HostPromoted(room_id="ABCD", new_host_session_id="B", previous_host_session_id="A")
        assert b.event_name == BroadcastType.HOST_PROMOTED
        assert b.event_name == "host:promoted"
        assert b.payload() == {"newHostSessionId": "B"}

    def test_room_closed(self) -> None:
        closed_at = datetime(2024, 1, 1, 12, tzinfo=UTC)
        b = RoomClosed(room_id="ABCD", reason=CloseReason.EMPTY, closed_at=closed_at)
        assert b.event_name == "room:closed"
        assert b.payload() == {"roomId": "ABCD", "closedAt": closed_at.isoformat()}

    def test_discriminated_parse(self) -> None:
        adapter: TypeAdapter[Broadcast] = TypeAdapter(Broadcast)
        parsed = adapter.validate_python(
            {"type": "room_closed", "room_id": "ABCD", "reason": "host_request"}
        )
        assert isinstance(parsed, RoomClosed)
        assert parsed.reason == CloseReason.HOST_REQUEST

    def test_room_created(self) -> None:
        b = RoomCreated(room_id="ABCD", host_display_name="Alice", created_at=T0)
        assert b.event_name == BroadcastType.ROOM_CREATED
        assert b.event_name == "room:created"
        assert b.payload() == {
            "roomId": "ABCD",
            "hostDisplayName": "Alice",
            "createdAt": T0.isoformat(),
        }
