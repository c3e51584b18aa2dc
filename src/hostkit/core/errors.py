"""Exception hierarchy for hostkit."""

from __future__ import annotations


class HostKitError(Exception):
    """Base exception for all hostkit errors."""


class RoomNotFoundError(HostKitError):
    """No coordinator is tracking the room."""


class RoomClosedError(RoomNotFoundError):
    """The room was closed; it no longer accepts commands that need it open."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room {room_id} is closed")
        self.room_id = room_id


class RoomAlreadyExistsError(HostKitError):
    """A room with the same id is still tracked by the hub."""


class NotHostError(HostKitError):
    """Operation requires the host role and the requester does not hold it."""

    def __init__(self, room_id: str, session_id: str) -> None:
        super().__init__(f"Session {session_id} is not the host of room {room_id}")
        self.room_id = room_id
        self.session_id = session_id


class RoomFullError(HostKitError):
    """Presence channel is at capacity."""


class InvalidChannelError(HostKitError):
    """Channel name is not a room presence channel."""


class TransportError(HostKitError):
    """A presence transport call failed."""
