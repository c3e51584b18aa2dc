"""Room model and room identifier helpers."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, StringConstraints

from hostkit.models.enums import RoomState

DEFAULT_CHANNEL_PREFIX = "presence-room-"

_ROOM_ID_RE = re.compile(r"[A-Za-z0-9]{4,12}")

RoomId = Annotated[str, StringConstraints(pattern=r"^[A-Za-z0-9]{4,12}$")]


class Room(BaseModel):
    """Point-in-time view of a room.

    Rooms have no central registry: a room exists while its presence channel
    has at least one subscriber and is closed once ``room:closed`` has been
    broadcast.
    """

    id: RoomId
    state: RoomState = RoomState.OPEN
    host_session_id: str | None = None
    member_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    closed_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return self.state == RoomState.CLOSED


def is_valid_room_id(room_id: str) -> bool:
    """Return True for 4-12 ASCII alphanumerics."""
    return _ROOM_ID_RE.fullmatch(room_id) is not None


def is_valid_display_name(display_name: str) -> bool:
    trimmed = display_name.strip()
    return 1 <= len(trimmed) <= 64


def channel_name(room_id: str, prefix: str = DEFAULT_CHANNEL_PREFIX) -> str:
    """Return the presence channel name for *room_id*."""
    return f"{prefix}{room_id}"


def room_id_from_channel(channel: str, prefix: str = DEFAULT_CHANNEL_PREFIX) -> str | None:
    """Extract the room id from a presence channel name.

    Returns ``None`` for channels that do not carry a valid room id.
    """
    if not channel.startswith(prefix):
        return None
    room_id = channel[len(prefix) :]
    return room_id if is_valid_room_id(room_id) else None
