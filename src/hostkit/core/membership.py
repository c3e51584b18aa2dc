"""Authoritative participant set for one room."""

from __future__ import annotations

from hostkit.models.enums import ParticipantRole, ParticipantStatus
from hostkit.models.participant import Participant


class MembershipStore:
    """Dict-based participant set keyed by session id.

    Owned by a single ``RoomCoordinator``; not safe to share between rooms.
    Iteration order is first-seen order, which a reconnect does not change.
    All reads return copies.
    """

    def __init__(self) -> None:
        self._members: dict[str, Participant] = {}

    def upsert(self, participant: Participant) -> Participant:
        """Insert or overwrite a participant, forcing ``status=connected``.

        Handles reconnect races where a leave and a rejoin interleave.
        """
        stored = participant.model_copy(update={"status": ParticipantStatus.CONNECTED})
        self._members[stored.session_id] = stored
        return stored.model_copy()

    def mark_leaving(self, session_id: str) -> bool:
        """Move a participant into the grace window.

        Returns whether the participant held the host role. Unknown sessions
        return ``False``.
        """
        member = self._members.get(session_id)
        if member is None:
            return False
        member.status = ParticipantStatus.RECONNECTING
        return member.is_host

    def finalize_leave(self, session_id: str) -> Participant | None:
        """Remove a participant whose grace window ran out.

        No-op (returns ``None``) unless the participant is still
        ``reconnecting``; a rejoin in the meantime keeps it in the room.
        """
        member = self._members.get(session_id)
        if member is None or member.status != ParticipantStatus.RECONNECTING:
            return None
        del self._members[session_id]
        member.status = ParticipantStatus.DISCONNECTED
        return member

    def promote(self, session_id: str) -> Participant:
        """Give *session_id* the host role and demote everyone else.

        Raises:
            KeyError: If the session is not a member.
        """
        target = self._members[session_id]
        for member in self._members.values():
            if member is not target and member.is_host:
                member.role = ParticipantRole.GUEST
        target.role = ParticipantRole.HOST
        return target.model_copy()

    def snapshot(self) -> list[Participant]:
        """Current members, used to seed freshly (re)connecting observers."""
        return [m.model_copy() for m in self._members.values()]

    def get(self, session_id: str) -> Participant | None:
        member = self._members.get(session_id)
        return member.model_copy() if member is not None else None

    def host(self) -> Participant | None:
        for member in self._members.values():
            if member.is_host:
                return member.model_copy()
        return None

    def clear(self) -> None:
        self._members.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._members

    def __len__(self) -> int:
        return len(self._members)
