"""Presence channel subscription authorization."""

from __future__ import annotations

import hashlib
import hmac
import json
import re
from typing import Any

from hostkit.core.errors import InvalidChannelError, RoomFullError
from hostkit.models.participant import Participant
from hostkit.models.room import DEFAULT_CHANNEL_PREFIX, room_id_from_channel
from hostkit.transport.config import PusherConfig

_SOCKET_ID_RE = re.compile(r"[0-9]+\.[0-9]+")


def authorize_presence(
    config: PusherConfig,
    socket_id: str,
    channel: str,
    participant: Participant,
    *,
    member_count: int = 0,
    max_room_size: int = 50,
    channel_prefix: str = DEFAULT_CHANNEL_PREFIX,
) -> dict[str, Any]:
    """Sign a presence subscription for *participant*.

    The participant is published as the member's ``user_info`` under
    ``user_id=participant.session_id``.

    Returns:
        ``{"auth": "<key>:<signature>", "channel_data": "<json>"}``

    Raises:
        InvalidChannelError: If *channel* is not a room presence channel or
            *socket_id* is malformed.
        RoomFullError: If the room already has *max_room_size* members.
    """
    if room_id_from_channel(channel, channel_prefix) is None:
        raise InvalidChannelError(f"Not a room presence channel: {channel!r}")
    if _SOCKET_ID_RE.fullmatch(socket_id) is None:
        raise InvalidChannelError(f"Invalid socket_id: {socket_id!r}")
    if member_count >= max_room_size:
        raise RoomFullError(f"Room on {channel} is full ({member_count}/{max_room_size})")

    channel_data = json.dumps(
        {"user_id": participant.session_id, "user_info": participant.to_presence_info()},
        separators=(",", ":"),
    )
    to_sign = f"{socket_id}:{channel}:{channel_data}"
    signature = hmac.new(
        config.secret.get_secret_value().encode(),
        to_sign.encode(),
        hashlib.sha256,
    ).hexdigest()
    return {"auth": f"{config.key}:{signature}", "channel_data": channel_data}
