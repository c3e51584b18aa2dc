"""In-memory presence transport with per-subscriber backlogs."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from hostkit.models.enums import PresenceEventType
from hostkit.transport.base import (
    BroadcastCallback,
    BroadcastMessage,
    PresenceChange,
    PresenceMember,
    PresenceTransport,
)

logger = logging.getLogger("hostkit.transport")


class InMemoryPresenceTransport(PresenceTransport):
    """In-process presence channels.

    :meth:`join` and :meth:`leave` change channel membership and notify the
    attached listener before returning. Broadcasts fan out to subscribers
    through per-subscriber backlogs drained by background tasks, and are
    also kept in :attr:`published` for inspection.

    Suitable for single-process deployments and tests.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        """Initialize the in-memory transport.

        Args:
            max_queue_size: Maximum number of broadcasts held per
                subscriber. The oldest are dropped when the backlog is full.
        """
        self._max_queue_size = max_queue_size
        self._members: dict[str, dict[str, PresenceMember]] = {}
        self._subscriptions: dict[str, _Subscription] = {}
        self._closed = False
        self.published: list[BroadcastMessage] = []

    # -- Membership --

    async def join(
        self, channel: str, user_id: str, user_info: dict[str, Any] | None = None
    ) -> PresenceMember:
        """Subscribe *user_id* to *channel*.

        Re-joining with the same id replaces the stored ``user_info``; the
        listener is notified either way, as a reconnect would be.
        """
        member = PresenceMember(user_id=user_id, user_info=dict(user_info or {}))
        self._members.setdefault(channel, {})[user_id] = member
        await self._notify(PresenceChange(PresenceEventType.MEMBER_ADDED, channel, member))
        return member

    async def leave(self, channel: str, user_id: str) -> bool:
        """Unsubscribe *user_id*. Returns False if it was not a member."""
        channel_members = self._members.get(channel)
        if not channel_members or user_id not in channel_members:
            return False
        member = channel_members.pop(user_id)
        if not channel_members:
            del self._members[channel]
        await self._notify(PresenceChange(PresenceEventType.MEMBER_REMOVED, channel, member))
        return True

    async def members(self, channel: str) -> list[PresenceMember]:
        return list(self._members.get(channel, {}).values())

    async def _notify(self, change: PresenceChange) -> None:
        if self._listener is None or self._closed:
            return
        try:
            await self._listener(change)
        except Exception:
            logger.exception(
                "Presence listener failed for %s on %s",
                change.type,
                change.channel,
                extra={"channel": change.channel, "user_id": change.member.user_id},
            )

    # -- Broadcasts --

    async def broadcast(self, channel: str, event_name: str, payload: dict[str, Any]) -> None:
        if self._closed:
            return

        message = BroadcastMessage(channel=channel, name=event_name, payload=dict(payload))
        self.published.append(message)
        for sub in self._subscriptions.values():
            if sub.channel == channel:
                # A full backlog drops its oldest message on append.
                sub.backlog.append(message)
                sub.wakeup.set()

    async def subscribe(self, channel: str, callback: BroadcastCallback) -> str:
        """Receive broadcasts on *channel*.

        Returns:
            A subscription ID that can be used to unsubscribe.
        """
        sub_id = uuid4().hex
        sub = _Subscription(channel, callback, deque(maxlen=self._max_queue_size))
        sub.task = asyncio.create_task(self._deliver(sub_id, sub), name=f"presence-sub:{sub_id}")
        self._subscriptions[sub_id] = sub
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        """Stop a subscription. Undelivered broadcasts are dropped.

        Returns:
            True if the subscription existed and was removed.
        """
        sub = self._subscriptions.pop(subscription_id, None)
        if sub is None:
            return False
        await sub.cancel()
        return True

    def published_on(self, channel: str, event_name: str | None = None) -> list[BroadcastMessage]:
        """Broadcasts sent to *channel*, optionally filtered by event name."""
        return [
            m
            for m in self.published
            if m.channel == channel and (event_name is None or m.name == event_name)
        ]

    async def close(self) -> None:
        """Stop all subscriptions and clean up."""
        self._closed = True
        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for sub in subscriptions:
            await sub.cancel()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def _deliver(self, sub_id: str, sub: _Subscription) -> None:
        while True:
            await sub.wakeup.wait()
            sub.wakeup.clear()
            while sub.backlog:
                message = sub.backlog.popleft()
                try:
                    await sub.callback(message)
                except Exception:
                    logger.exception(
                        "Broadcast callback failed for %s on %s",
                        message.name,
                        sub.channel,
                        extra={"channel": sub.channel, "subscription_id": sub_id},
                    )


@dataclass
class _Subscription:
    channel: str
    callback: BroadcastCallback
    backlog: deque[BroadcastMessage]
    wakeup: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task[None] | None = None

    async def cancel(self) -> None:
        self.backlog.clear()
        if self.task is not None:
            self.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.task
            self.task = None
