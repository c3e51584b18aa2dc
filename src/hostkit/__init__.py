"""hostkit - ephemeral rooms with presence tracking and automatic host failover."""

from hostkit._version import __version__
from hostkit.auth import authorize_presence
from hostkit.config import HubConfig
from hostkit.core.coordinator import RoomCoordinator
from hostkit.core.errors import (
    HostKitError,
    InvalidChannelError,
    NotHostError,
    RoomAlreadyExistsError,
    RoomClosedError,
    RoomFullError,
    RoomNotFoundError,
    TransportError,
)
from hostkit.core.grace import GraceScheduler
from hostkit.core.hub import FrameworkEventHandler, RoomHub
from hostkit.core.locks import InMemoryLockManager, RoomLockManager
from hostkit.core.membership import MembershipStore
from hostkit.core.succession import choose_new_host, choose_successor
from hostkit.models.enums import (
    BroadcastType,
    CloseReason,
    ParticipantRole,
    ParticipantStatus,
    PresenceEventType,
    RoomState,
)
from hostkit.models.event import (
    Broadcast,
    ExplicitCloseRequested,
    GraceExpired,
    HostPromoted,
    ParticipantJoined,
    ParticipantLeft,
    RoomClosed,
    RoomCommand,
    RoomCreated,
)
from hostkit.models.framework_event import FrameworkEvent
from hostkit.models.participant import Participant
from hostkit.models.room import (
    Room,
    channel_name,
    is_valid_display_name,
    is_valid_room_id,
    room_id_from_channel,
)
from hostkit.transport import (
    BroadcastMessage,
    InMemoryPresenceTransport,
    PresenceChange,
    PresenceMember,
    PresenceTransport,
    PusherConfig,
    PusherPresenceTransport,
)
from hostkit.webhook import parse_presence_webhook, verify_webhook_signature

__all__ = [
    "Broadcast",
    "BroadcastMessage",
    "BroadcastType",
    "CloseReason",
    "ExplicitCloseRequested",
    "FrameworkEvent",
    "FrameworkEventHandler",
    "GraceExpired",
    "GraceScheduler",
    "HostKitError",
    "HostPromoted",
    "HubConfig",
    "InMemoryLockManager",
    "InMemoryPresenceTransport",
    "InvalidChannelError",
    "MembershipStore",
    "NotHostError",
    "Participant",
    "ParticipantJoined",
    "ParticipantLeft",
    "ParticipantRole",
    "ParticipantStatus",
    "PresenceChange",
    "PresenceEventType",
    "PresenceMember",
    "PresenceTransport",
    "PusherConfig",
    "PusherPresenceTransport",
    "Room",
    "RoomAlreadyExistsError",
    "RoomClosedError",
    "RoomClosed",
    "RoomCommand",
    "RoomCoordinator",
    "RoomCreated",
    "RoomFullError",
    "RoomHub",
    "RoomLockManager",
    "RoomNotFoundError",
    "RoomState",
    "TransportError",
    "__version__",
    "authorize_presence",
    "channel_name",
    "choose_new_host",
    "choose_successor",
    "is_valid_display_name",
    "is_valid_room_id",
    "parse_presence_webhook",
    "room_id_from_channel",
    "verify_webhook_signature",
]
