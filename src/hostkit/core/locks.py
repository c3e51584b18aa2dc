"""Per-room async locking with LRU eviction."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


class RoomLockManager(ABC):
    """Abstract base for per-room serialization.

    All commands for one room must run one at a time because succession
    reads a consistent membership snapshot. Different rooms never wait on
    each other. Implement this to back the locks with Redis, Postgres
    advisory locks, or similar when several processes share rooms.
    """

    @abstractmethod
    @asynccontextmanager
    async def locked(self, room_id: str) -> AsyncIterator[None]:
        """Acquire an exclusive lock for *room_id*."""
        yield  # pragma: no cover


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class InMemoryLockManager(RoomLockManager):
    """In-process ``asyncio.Lock`` per room.

    At most *max_locks* idle locks are cached; the least recently used idle
    ones are dropped first. A lock that is held or awaited is never evicted,
    so the cache may temporarily exceed the limit.
    """

    def __init__(self, max_locks: int = 1024) -> None:
        self._entries: OrderedDict[str, _LockEntry] = OrderedDict()
        self._max_locks = max_locks

    def _acquire_entry(self, room_id: str) -> _LockEntry:
        entry = self._entries.get(room_id)
        if entry is None:
            entry = _LockEntry()
            self._entries[room_id] = entry
        else:
            self._entries.move_to_end(room_id)
        entry.users += 1
        self._evict()
        return entry

    def _evict(self) -> None:
        excess = len(self._entries) - self._max_locks
        if excess <= 0:
            return
        idle = [key for key, entry in self._entries.items() if entry.users <= 0]
        for key in idle[:excess]:
            del self._entries[key]

    @asynccontextmanager
    async def locked(self, room_id: str) -> AsyncIterator[None]:
        entry = self._acquire_entry(room_id)
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1

    @property
    def size(self) -> int:
        """Return the number of cached locks."""
        return len(self._entries)
