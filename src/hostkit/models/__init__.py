"""Data models for hostkit."""

from hostkit.models.enums import (
    BroadcastType,
    CloseReason,
    ParticipantRole,
    ParticipantStatus,
    PresenceEventType,
    RoomState,
)
from hostkit.models.event import (
    Broadcast,
    ExplicitCloseRequested,
    GraceExpired,
    HostPromoted,
    ParticipantJoined,
    ParticipantLeft,
    RoomClosed,
    RoomCommand,
    RoomCreated,
)
from hostkit.models.framework_event import FrameworkEvent
from hostkit.models.participant import Participant
from hostkit.models.room import Room

__all__ = [
    "Broadcast",
    "BroadcastType",
    "CloseReason",
    "ExplicitCloseRequested",
    "FrameworkEvent",
    "GraceExpired",
    "HostPromoted",
    "Participant",
    "ParticipantJoined",
    "ParticipantLeft",
    "ParticipantRole",
    "ParticipantStatus",
    "PresenceEventType",
    "Room",
    "RoomClosed",
    "RoomCommand",
    "RoomCreated",
    "RoomState",
]
