"""All string enums for hostkit."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class ParticipantRole(StrEnum):
    HOST = "host"
    GUEST = "guest"


@unique
class ParticipantStatus(StrEnum):
    CONNECTED = "connected"
    # Grace window: left but may still rejoin
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


@unique
class RoomState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


@unique
class CloseReason(StrEnum):
    EMPTY = "empty"
    HOST_REQUEST = "host_request"


@unique
class BroadcastType(StrEnum):
    """Event names published on a room's presence channel."""

    HOST_PROMOTED = "host:promoted"
    ROOM_CREATED = "room:created"
    ROOM_CLOSED = "room:closed"


@unique
class PresenceEventType(StrEnum):
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
