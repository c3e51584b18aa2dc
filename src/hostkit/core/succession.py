"""Host succession policy: earliest-connected candidate wins."""

from __future__ import annotations

from collections.abc import Iterable

from hostkit.models.participant import Participant


def choose_successor(candidates: Iterable[Participant]) -> Participant | None:
    """Pick the next host from *candidates*.

    Callers must already have excluded the outgoing host. Returns the
    candidate with the earliest ``connected_at``; on equal timestamps the
    first one in input order wins. Returns ``None`` for an empty input.
    """
    successor: Participant | None = None
    for candidate in candidates:
        # Strict comparison keeps the first of equal timestamps
        if successor is None or candidate.connected_at < successor.connected_at:
            successor = candidate
    return successor


def choose_new_host(
    participants: Iterable[Participant],
    current_host_session_id: str | None = None,
) -> Participant | None:
    """Exclude the current host, then apply :func:`choose_successor`."""
    return choose_successor(
        p for p in participants if p.session_id != current_host_session_id
    )
