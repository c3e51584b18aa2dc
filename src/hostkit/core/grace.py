"""Grace-window timers for departed participants."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from typing import Any

logger = logging.getLogger("hostkit.grace")

GraceCallback = Callable[[str, str], Coroutine[Any, Any, None]]


class GraceScheduler:
    """Runs *on_expire(room_id, session_id)* once a leave's grace window ends.

    A rejoin does not cancel the timer: the membership store only removes
    participants that are still ``reconnecting``, so a stale timer firing
    after a rejoin is harmless. Scheduling the same (room, session) again
    replaces the earlier timer so a leave/rejoin/leave sequence measures the
    window from the latest leave.
    """

    def __init__(self, grace_seconds: float, on_expire: GraceCallback) -> None:
        self._grace_seconds = grace_seconds
        self._on_expire = on_expire
        self._timers: dict[tuple[str, str], asyncio.Task[None]] = {}

    @property
    def grace_seconds(self) -> float:
        return self._grace_seconds

    def schedule(self, room_id: str, session_id: str) -> None:
        key = (room_id, session_id)
        previous = self._timers.pop(key, None)
        if previous is not None:
            previous.cancel()
        task = asyncio.create_task(self._run(key), name=f"grace:{room_id}:{session_id}")
        task.add_done_callback(self._task_done)
        self._timers[key] = task
        logger.debug(
            "Grace window started for %s in room %s (%.1fs)",
            session_id,
            room_id,
            self._grace_seconds,
            extra={"room_id": room_id, "session_id": session_id},
        )

    async def _run(self, key: tuple[str, str]) -> None:
        await asyncio.sleep(self._grace_seconds)
        if self._timers.get(key) is asyncio.current_task():
            del self._timers[key]
        await self._on_expire(*key)

    @staticmethod
    def _task_done(task: asyncio.Task[None]) -> None:
        """Log exceptions from grace timers."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Grace timer %s failed: %s", task.get_name(), exc)

    def pending(self, room_id: str | None = None) -> int:
        """Number of timers still waiting, optionally for one room."""
        if room_id is None:
            return len(self._timers)
        return sum(1 for key in self._timers if key[0] == room_id)

    async def cancel_room(self, room_id: str) -> int:
        """Cancel every timer for *room_id*. Returns how many were cancelled."""
        keys = [key for key in self._timers if key[0] == room_id]
        for key in keys:
            await self._cancel(self._timers.pop(key))
        return len(keys)

    async def close(self) -> None:
        timers = list(self._timers.values())
        self._timers.clear()
        for task in timers:
            await self._cancel(task)

    @staticmethod
    async def _cancel(task: asyncio.Task[None]) -> None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
