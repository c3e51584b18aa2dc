"""Presence webhook parsing and signature verification."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

from hostkit.models.enums import PresenceEventType
from hostkit.transport.base import PresenceChange, PresenceMember

logger = logging.getLogger("hostkit.webhook")

_PRESENCE_EVENTS = {e.value: e for e in PresenceEventType}


def verify_webhook_signature(body: bytes | str, signature: str | None, secret: str) -> bool:
    """Check the HMAC-SHA256 hex digest of the raw request *body*."""
    if not signature:
        return False
    raw = body.encode() if isinstance(body, str) else body
    expected = hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def parse_presence_webhook(payload: dict[str, Any]) -> list[PresenceChange]:
    """Convert a presence webhook body into membership changes.

    Expected payload shape::

        {
            "time_ms": 1700000000000,
            "events": [
                {
                    "name": "member_removed",
                    "channel": "presence-room-ABCD",
                    "user_id": "123.456",
                    "user_info": {...}      // optional
                }
            ]
        }

    Events other than ``member_added`` / ``member_removed`` are skipped, and
    so are malformed entries: one bad event never drops the rest.
    """
    events = payload.get("events")
    if not isinstance(events, list):
        return []

    changes: list[PresenceChange] = []
    for raw in events:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object webhook event")
            continue
        event_type = _PRESENCE_EVENTS.get(raw.get("name", ""))
        if event_type is None:
            continue
        channel = raw.get("channel")
        user_id = raw.get("user_id")
        if not channel or not user_id:
            logger.warning(
                "Skipping %s event without channel or user_id",
                event_type,
                extra={"channel": channel},
            )
            continue
        user_info = raw.get("user_info")
        changes.append(
            PresenceChange(
                type=event_type,
                channel=str(channel),
                member=PresenceMember(
                    user_id=str(user_id),
                    user_info=user_info if isinstance(user_info, dict) else {},
                ),
            )
        )
    return changes
