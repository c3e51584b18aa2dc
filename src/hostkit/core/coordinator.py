"""Per-room state machine driving membership and host succession."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from hostkit.core.errors import NotHostError
from hostkit.core.membership import MembershipStore
from hostkit.core.succession import choose_successor
from hostkit.models.enums import CloseReason, ParticipantRole, ParticipantStatus, RoomState
from hostkit.models.event import (
    Broadcast,
    ExplicitCloseRequested,
    GraceExpired,
    HostPromoted,
    ParticipantJoined,
    ParticipantLeft,
    RoomClosed,
    RoomCommand,
)
from hostkit.models.participant import Participant
from hostkit.models.room import Room

logger = logging.getLogger("hostkit.coordinator")


class RoomCoordinator:
    """Authoritative state for one room.

    States are ``open`` (at least one participant, exactly one host) and
    ``closed`` (terminal). Every command goes through :meth:`handle`, which
    returns the broadcasts the caller should publish. The coordinator never
    waits on delivery of those broadcasts.

    Not safe for concurrent use: callers must serialize commands per room.
    """

    def __init__(
        self,
        room_id: str,
        *,
        store: MembershipStore | None = None,
        created_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._room_id = room_id
        self._store = store or MembershipStore()
        self._state = RoomState.OPEN
        self._created_at = created_at or datetime.now(UTC)
        self._closed_at: datetime | None = None
        self._metadata = dict(metadata or {})

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def state(self) -> RoomState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state == RoomState.CLOSED

    @property
    def host_session_id(self) -> str | None:
        host = self._store.host()
        return host.session_id if host is not None else None

    def snapshot(self) -> list[Participant]:
        return self._store.snapshot()

    def participant(self, session_id: str) -> Participant | None:
        return self._store.get(session_id)

    def to_room(self) -> Room:
        return Room(
            id=self._room_id,
            state=self._state,
            host_session_id=self.host_session_id,
            member_count=len(self._store),
            created_at=self._created_at,
            closed_at=self._closed_at,
            metadata=dict(self._metadata),
        )

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._store

    # -- Dispatch --

    def handle(self, command: RoomCommand) -> list[Broadcast]:
        """Apply *command* and return the broadcasts it produced.

        Commands for a closed room are dropped without error.

        Raises:
            NotHostError: On an explicit close from a non-host.
        """
        if self._state == RoomState.CLOSED:
            logger.debug(
                "Ignoring %s for closed room %s",
                command.type,
                self._room_id,
                extra={"room_id": self._room_id},
            )
            return []

        if isinstance(command, ParticipantJoined):
            return self._on_joined(command.participant)
        if isinstance(command, ParticipantLeft):
            return self._on_left(command.session_id)
        if isinstance(command, ExplicitCloseRequested):
            return self._on_close_requested(command.requester_session_id)
        if isinstance(command, GraceExpired):
            return self._on_grace_expired(command.session_id)
        raise TypeError(f"Unsupported room command: {type(command).__name__}")

    # -- Transitions --

    def _on_joined(self, participant: Participant) -> list[Broadcast]:
        current_host = self._store.host()
        if current_host is None:
            # First join, or a first joiner that did not claim the role
            role = ParticipantRole.HOST
        elif current_host.session_id == participant.session_id:
            role = ParticipantRole.HOST
        else:
            role = ParticipantRole.GUEST

        if role != participant.role:
            logger.info(
                "Reconciled role of %s in room %s: %s -> %s",
                participant.session_id,
                self._room_id,
                participant.role,
                role,
                extra={"room_id": self._room_id, "session_id": participant.session_id},
            )
        self._store.upsert(participant.model_copy(update={"role": role}))
        return []

    def _on_left(self, session_id: str) -> list[Broadcast]:
        if session_id not in self._store:
            return []
        was_host = self._store.mark_leaving(session_id)
        if not was_host:
            return []
        return self._succeed(session_id)

    def _on_close_requested(self, requester_session_id: str) -> list[Broadcast]:
        if self.host_session_id != requester_session_id:
            logger.info(
                "Rejected close of room %s by non-host %s",
                self._room_id,
                requester_session_id,
                extra={"room_id": self._room_id, "session_id": requester_session_id},
            )
            raise NotHostError(self._room_id, requester_session_id)
        return [self._close(CloseReason.HOST_REQUEST)]

    def _on_grace_expired(self, session_id: str) -> list[Broadcast]:
        # The host is always connected (a leaving host is replaced at once),
        # so only guests reach the end of their grace window.
        removed = self._store.finalize_leave(session_id)
        if removed is not None and len(self._store) == 0:
            return [self._close(CloseReason.EMPTY)]
        return []

    def _succeed(self, outgoing_session_id: str) -> list[Broadcast]:
        candidates = [
            p
            for p in self._store.snapshot()
            if p.session_id != outgoing_session_id and p.status == ParticipantStatus.CONNECTED
        ]
        successor = choose_successor(candidates)
        if successor is None:
            return [self._close(CloseReason.EMPTY)]

        self._store.promote(successor.session_id)
        logger.info(
            "Promoted %s to host of room %s",
            successor.session_id,
            self._room_id,
            extra={"room_id": self._room_id, "session_id": successor.session_id},
        )
        return [
            HostPromoted(
                room_id=self._room_id,
                new_host_session_id=successor.session_id,
                previous_host_session_id=outgoing_session_id,
            )
        ]

    def _close(self, reason: CloseReason) -> RoomClosed:
        closed = RoomClosed(room_id=self._room_id, reason=reason)
        self._state = RoomState.CLOSED
        self._closed_at = closed.closed_at
        self._store.clear()
        logger.info(
            "Room %s closed (%s)",
            self._room_id,
            reason,
            extra={"room_id": self._room_id, "reason": str(reason)},
        )
        return closed
