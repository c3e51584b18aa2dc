"""Presence transports."""

from hostkit.transport.base import (
    BroadcastCallback,
    BroadcastMessage,
    PresenceChange,
    PresenceListener,
    PresenceMember,
    PresenceTransport,
)
from hostkit.transport.config import PusherConfig
from hostkit.transport.memory import InMemoryPresenceTransport
from hostkit.transport.pusher import PusherPresenceTransport, sign_request

__all__ = [
    "BroadcastCallback",
    "BroadcastMessage",
    "InMemoryPresenceTransport",
    "PresenceChange",
    "PresenceListener",
    "PresenceMember",
    "PresenceTransport",
    "PusherConfig",
    "PusherPresenceTransport",
    "sign_request",
]
