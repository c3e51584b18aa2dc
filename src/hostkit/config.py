"""Hub configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field

from hostkit.models.room import DEFAULT_CHANNEL_PREFIX


class HubConfig(BaseModel):
    """Configuration for a :class:`~hostkit.core.hub.RoomHub`.

    Attributes:
        grace_seconds: How long a departed participant may rejoin before it
            is removed from the room.
        max_room_size: Presence subscriptions are refused at this many
            members.
        lock_cache_size: Idle per-room locks kept before LRU eviction.
        channel_prefix: Prefix that maps presence channels to room ids.
    """

    grace_seconds: float = Field(default=5.0, ge=0.0)
    max_room_size: int = Field(default=50, gt=0)
    lock_cache_size: int = Field(default=1024, gt=0)
    channel_prefix: str = Field(default=DEFAULT_CHANNEL_PREFIX, min_length=1)
