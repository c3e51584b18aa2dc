"""Abstract base class and types for presence transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from hostkit.models.enums import PresenceEventType


@dataclass
class PresenceMember:
    """A subscriber of a presence channel as the transport reports it."""

    user_id: str
    user_info: dict[str, Any] = field(default_factory=dict)


@dataclass
class PresenceChange:
    """A ``member_added`` / ``member_removed`` notification."""

    type: PresenceEventType
    channel: str
    member: PresenceMember


@dataclass
class BroadcastMessage:
    """An event published to every subscriber of a channel."""

    channel: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "channel": self.channel,
            "name": self.name,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BroadcastMessage:
        return cls(
            id=data["id"],
            channel=data["channel"],
            name=data["name"],
            payload=data.get("payload", {}),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


PresenceListener = Callable[[PresenceChange], Coroutine[Any, Any, None]]
BroadcastCallback = Callable[[BroadcastMessage], Coroutine[Any, Any, None]]


class PresenceTransport(ABC):
    """Abstract base for publish/subscribe presence services.

    The hub only consumes membership changes and issues broadcasts; delivery
    guarantees are the transport's concern. Transports that observe
    membership directly push changes to the listener given to
    :meth:`attach`; webhook-driven transports leave that to
    ``RoomHub.handle_webhook``.
    """

    _listener: PresenceListener | None = None

    def attach(self, listener: PresenceListener) -> None:
        """Register the callback receiving membership changes."""
        self._listener = listener

    @abstractmethod
    async def broadcast(self, channel: str, event_name: str, payload: dict[str, Any]) -> None:
        """Publish *event_name* with *payload* to every subscriber of *channel*.

        Raises:
            TransportError: If the publish could not be handed off.
        """
        ...

    @abstractmethod
    async def members(self, channel: str) -> list[PresenceMember]:
        """Return the current subscribers of *channel*."""
        ...

    async def is_occupied(self, channel: str) -> bool:
        """True while *channel* has at least one subscriber."""
        return len(await self.members(channel)) > 0

    async def close(self) -> None:
        """Clean up resources.

        Override this method in subclasses that need cleanup.
        The default implementation does nothing.
        """
        return None
