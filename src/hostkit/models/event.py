"""Room commands (inbound) and broadcasts (outbound)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from hostkit.models.enums import BroadcastType, CloseReason
from hostkit.models.participant import Participant

# -- Commands consumed by a RoomCoordinator --


class ParticipantJoined(BaseModel):
    """A connection subscribed (or resubscribed) to the room channel."""

    type: Literal["participant_joined"] = "participant_joined"
    participant: Participant


class ParticipantLeft(BaseModel):
    """The transport reported a member as removed from the channel."""

    type: Literal["participant_left"] = "participant_left"
    session_id: str


class ExplicitCloseRequested(BaseModel):
    """A participant asked to close the room. Only the host may do so."""

    type: Literal["explicit_close_requested"] = "explicit_close_requested"
    requester_session_id: str


class GraceExpired(BaseModel):
    """The grace window for a departed participant ran out."""

    type: Literal["grace_expired"] = "grace_expired"
    session_id: str


RoomCommand = Annotated[
    ParticipantJoined | ParticipantLeft | ExplicitCloseRequested | GraceExpired,
    Field(discriminator="type"),
]


# -- Broadcasts produced by a RoomCoordinator --


class HostPromoted(BaseModel):
    type: Literal["host_promoted"] = "host_promoted"
    room_id: str
    new_host_session_id: str
    previous_host_session_id: str | None = None

    @property
    def event_name(self) -> BroadcastType:
        return BroadcastType.HOST_PROMOTED

    def payload(self) -> dict[str, Any]:
        return {"newHostSessionId": self.new_host_session_id}


class RoomClosed(BaseModel):
    type: Literal["room_closed"] = "room_closed"
    room_id: str
    reason: CloseReason
    closed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_name(self) -> BroadcastType:
        return BroadcastType.ROOM_CLOSED

    def payload(self) -> dict[str, Any]:
        return {"roomId": self.room_id, "closedAt": self.closed_at.isoformat()}


class RoomCreated(BaseModel):
    """Announces a room opened through the creation request, not by presence."""

    type: Literal["room_created"] = "room_created"
    room_id: str
    host_display_name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_name(self) -> BroadcastType:
        return BroadcastType.ROOM_CREATED

    def payload(self) -> dict[str, Any]:
        return {
            "roomId": self.room_id,
            "hostDisplayName": self.host_display_name,
            "createdAt": self.created_at.isoformat(),
        }


Broadcast = Annotated[HostPromoted | RoomClosed | RoomCreated, Field(discriminator="type")]
