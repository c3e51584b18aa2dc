"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Coroutine
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from hostkit.config import HubConfig
from hostkit.core.hub import RoomHub
from hostkit.models.enums import ParticipantRole
from hostkit.models.participant import Participant
from hostkit.transport.memory import InMemoryPresenceTransport

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def make_participant(
    session_id: str,
    offset: float = 0,
    role: ParticipantRole = ParticipantRole.GUEST,
    display_name: str | None = None,
) -> Participant:
    """Participant connected *offset* seconds after ``T0``."""
    return Participant(
        session_id=session_id,
        display_name=display_name or f"user-{session_id}",
        role=role,
        connected_at=T0 + timedelta(seconds=offset),
    )


@pytest.fixture
def advance() -> Callable[[int], Coroutine[Any, Any, None]]:
    """Yield control to let pending tasks run without real delay.

    ::

        await advance()       # 5 yields (default)
        await advance(10)     # 10 yields for heavier workloads
    """

    async def _advance(n: int = 5) -> None:
        for _ in range(n):
            await asyncio.sleep(0)

    return _advance


@pytest.fixture
def transport() -> InMemoryPresenceTransport:
    return InMemoryPresenceTransport()


@pytest.fixture
async def hub(transport: InMemoryPresenceTransport) -> AsyncIterator[RoomHub]:
    hub = RoomHub(transport, config=HubConfig(grace_seconds=0.02))
    yield hub
    await hub.close()
