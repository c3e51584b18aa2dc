"""RoomHub - central orchestrator for room membership and host succession."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

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
from hostkit.core.locks import InMemoryLockManager, RoomLockManager
from hostkit.models.enums import ParticipantRole, PresenceEventType
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
from hostkit.models.room import Room, channel_name, is_valid_room_id, room_id_from_channel
from hostkit.transport.base import PresenceChange, PresenceTransport
from hostkit.transport.config import PusherConfig
from hostkit.transport.memory import InMemoryPresenceTransport
from hostkit.webhook import parse_presence_webhook

# Re-export errors so existing imports continue to work
__all__ = [
    "FrameworkEventHandler",
    "HostKitError",
    "InvalidChannelError",
    "NotHostError",
    "RoomAlreadyExistsError",
    "RoomClosedError",
    "RoomFullError",
    "RoomHub",
    "RoomNotFoundError",
    "TransportError",
]

logger = logging.getLogger("hostkit.hub")

FrameworkEventHandler = Callable[[FrameworkEvent], Coroutine[Any, Any, None]]


class RoomHub:
    """Owns every room coordinator of this process.

    Presence changes (from the transport listener or from webhooks) become
    room commands; commands for one room run under that room's lock, and the
    broadcasts they produce are published on the room's presence channel.
    Publishing is at-most-once: failures are logged, never retried, and
    never undo the transition that produced them.
    """

    def __init__(
        self,
        transport: PresenceTransport | None = None,
        *,
        config: HubConfig | None = None,
        lock_manager: RoomLockManager | None = None,
    ) -> None:
        self._config = config or HubConfig()
        self._transport = transport or InMemoryPresenceTransport()
        self._lock_manager = lock_manager or InMemoryLockManager(
            max_locks=self._config.lock_cache_size
        )
        self._rooms: dict[str, RoomCoordinator] = {}
        self._grace = GraceScheduler(self._config.grace_seconds, self._expire_grace)
        self._event_handlers: list[tuple[str, FrameworkEventHandler]] = []
        self._transport.attach(self.handle_presence)

    @property
    def transport(self) -> PresenceTransport:
        return self._transport

    @property
    def config(self) -> HubConfig:
        return self._config

    @property
    def grace(self) -> GraceScheduler:
        return self._grace

    def channel_for(self, room_id: str) -> str:
        return channel_name(room_id, self._config.channel_prefix)

    # -- Rooms --

    async def create_room(
        self,
        room_id: str,
        host: Participant,
        metadata: dict[str, Any] | None = None,
    ) -> Room:
        """Open a room with *host* as its first participant and host.

        Publishes ``room:created`` on the room channel. Rooms opened by a
        presence subscription are not announced.

        Raises:
            ValueError: If *room_id* is not 4-12 alphanumerics.
            RoomAlreadyExistsError: If the room is tracked, open or closed.
                Closed rooms must be discarded before their id is reused.
        """
        if not is_valid_room_id(room_id):
            raise ValueError(f"Invalid room id: {room_id!r}")
        async with self._lock_manager.locked(room_id):
            if room_id in self._rooms:
                raise RoomAlreadyExistsError(f"Room {room_id} already exists")
            coordinator = RoomCoordinator(room_id, metadata=metadata)
            first = host.model_copy(update={"role": ParticipantRole.HOST})
            coordinator.handle(ParticipantJoined(participant=first))
            # Only track the coordinator once it renders as a valid Room.
            room = coordinator.to_room()
            self._rooms[room_id] = coordinator
            created = RoomCreated(
                room_id=room_id,
                host_display_name=first.display_name,
                created_at=room.created_at,
            )
            await self._publish(room_id, [created])
        logger.info(
            "Room %s created by %s",
            room_id,
            host.session_id,
            extra={"room_id": room_id, "session_id": host.session_id},
        )
        await self._emit_framework_event(
            "room_created", room_id=room_id, session_id=host.session_id
        )
        return room

    async def get_room(self, room_id: str) -> Room:
        """Get a room by ID. Raises RoomNotFoundError if missing."""
        return self._get_coordinator(room_id).to_room()

    def snapshot(self, room_id: str) -> list[Participant]:
        """Current participants of a room, for seeding a (re)connecting client."""
        return self._get_coordinator(room_id).snapshot()

    def list_rooms(self, *, include_closed: bool = False) -> list[Room]:
        return [
            c.to_room() for c in self._rooms.values() if include_closed or not c.is_closed
        ]

    async def discard_room(self, room_id: str) -> bool:
        """Forget a closed room. Open rooms are never discarded."""
        async with self._lock_manager.locked(room_id):
            coordinator = self._rooms.get(room_id)
            if coordinator is None or not coordinator.is_closed:
                return False
            del self._rooms[room_id]
        await self._grace.cancel_room(room_id)
        return True

    async def room_exists(self, room_id: str) -> bool:
        """True while the room's presence channel has a subscriber."""
        return await self._transport.is_occupied(self.channel_for(room_id))

    async def member_count(self, room_id: str) -> int:
        return len(await self._transport.members(self.channel_for(room_id)))

    # -- Commands --

    async def dispatch(self, room_id: str, command: RoomCommand) -> list[Broadcast]:
        """Run *command* on the room's coordinator and publish the result.

        Raises:
            RoomNotFoundError: If no coordinator tracks the room.
            NotHostError: On an explicit close from a non-host.
        """
        async with self._lock_manager.locked(room_id):
            coordinator = self._get_coordinator(room_id)
            was_member = self._session_of(command) in coordinator
            broadcasts = coordinator.handle(command)

            if (
                isinstance(command, ParticipantLeft)
                and not coordinator.is_closed
                and command.session_id in coordinator
            ):
                self._grace.schedule(room_id, command.session_id)

            await self._publish(room_id, broadcasts)

        await self._emit_command_events(room_id, command, was_member, coordinator)
        for broadcast in broadcasts:
            await self._emit_broadcast_event(broadcast)
        if coordinator.is_closed:
            await self._grace.cancel_room(room_id)
        return broadcasts

    async def join(self, room_id: str, participant: Participant) -> list[Broadcast]:
        return await self.dispatch(room_id, ParticipantJoined(participant=participant))

    async def leave(self, room_id: str, session_id: str) -> list[Broadcast]:
        return await self.dispatch(room_id, ParticipantLeft(session_id=session_id))

    async def request_close(self, room_id: str, requester_session_id: str) -> RoomClosed:
        """Close a room on behalf of its host.

        Raises:
            NotHostError: If the requester is not the current host. The room
                stays open.
            RoomNotFoundError: If no coordinator tracks the room.
            RoomClosedError: If the room is tracked but already closed. It
                subclasses RoomNotFoundError.
        """
        broadcasts = await self.dispatch(
            room_id, ExplicitCloseRequested(requester_session_id=requester_session_id)
        )
        for broadcast in broadcasts:
            if isinstance(broadcast, RoomClosed):
                return broadcast
        raise RoomClosedError(room_id)

    # -- Presence input --

    async def handle_presence(self, change: PresenceChange) -> None:
        """Translate a transport membership change into a room command.

        A ``member_added`` for an unknown room opens it (a room exists once
        its channel has a subscriber). Changes on non-room channels and
        removals for unknown rooms are ignored.

        Raises:
            pydantic.ValidationError: If the member's ``user_info`` does not
                describe a valid participant.
        """
        room_id = room_id_from_channel(change.channel, self._config.channel_prefix)
        if room_id is None:
            logger.debug("Ignoring presence change on %s", change.channel)
            return

        if change.type == PresenceEventType.MEMBER_ADDED:
            participant = Participant.from_presence_info(
                change.member.user_info, session_id=change.member.user_id
            )
            if room_id not in self._rooms:
                await self._open_from_presence(room_id, participant)
                return
            await self.join(room_id, participant)
        elif change.type == PresenceEventType.MEMBER_REMOVED:
            if room_id not in self._rooms:
                logger.debug("Ignoring member_removed for unknown room %s", room_id)
                return
            await self.leave(room_id, change.member.user_id)

    async def handle_webhook(self, payload: dict[str, Any]) -> int:
        """Apply every presence event in a webhook body.

        Each event is handled independently; failures are logged and the
        remaining events still run. Returns the number of events applied.
        """
        applied = 0
        for change in parse_presence_webhook(payload):
            try:
                await self.handle_presence(change)
            except Exception:
                logger.exception(
                    "Error processing webhook event %s",
                    change.type,
                    extra={"channel": change.channel, "user_id": change.member.user_id},
                )
                continue
            applied += 1
        return applied

    async def authorize_subscription(
        self,
        credentials: PusherConfig,
        socket_id: str,
        channel: str,
        display_name: str,
        role: ParticipantRole = ParticipantRole.GUEST,
    ) -> dict[str, Any]:
        """Sign a presence subscription, enforcing the room size cap.

        The socket id becomes the participant's session id. If the member
        count cannot be read the subscription is still signed, since a new
        room has no channel yet.

        Raises:
            RoomFullError: If the room is at ``max_room_size``.
            InvalidChannelError: If *channel* is not a room presence channel.
            pydantic.ValidationError: If *display_name* is invalid.
        """
        participant = Participant(session_id=socket_id, display_name=display_name, role=role)
        try:
            count = len(await self._transport.members(channel))
        except TransportError:
            logger.warning("Failed to check room size for %s", channel, exc_info=True)
            count = 0
        return authorize_presence(
            credentials,
            socket_id,
            channel,
            participant,
            member_count=count,
            max_room_size=self._config.max_room_size,
            channel_prefix=self._config.channel_prefix,
        )

    # -- Framework events --

    def on(self, event_type: str) -> Callable[..., Any]:
        """Decorator to register a framework event handler filtered by type."""

        def decorator(fn: FrameworkEventHandler) -> FrameworkEventHandler:
            self._event_handlers.append((event_type, fn))
            return fn

        return decorator

    # -- Lifecycle --

    async def close(self) -> None:
        """Cancel grace timers and close the transport."""
        await self._grace.close()
        await self._transport.close()

    async def __aenter__(self) -> RoomHub:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- Internal helpers --

    def _get_coordinator(self, room_id: str) -> RoomCoordinator:
        coordinator = self._rooms.get(room_id)
        if coordinator is None:
            raise RoomNotFoundError(f"Room {room_id} not found")
        return coordinator

    async def _open_from_presence(self, room_id: str, participant: Participant) -> None:
        async with self._lock_manager.locked(room_id):
            if room_id not in self._rooms:
                self._rooms[room_id] = RoomCoordinator(room_id)
                created = True
            else:
                created = False
        if created:
            logger.info("Room %s opened by presence", room_id, extra={"room_id": room_id})
            await self._emit_framework_event(
                "room_created", room_id=room_id, session_id=participant.session_id
            )
        await self.join(room_id, participant)

    async def _expire_grace(self, room_id: str, session_id: str) -> None:
        try:
            await self.dispatch(room_id, GraceExpired(session_id=session_id))
        except RoomNotFoundError:
            logger.debug("Grace expired for discarded room %s", room_id)

    async def _publish(self, room_id: str, broadcasts: list[Broadcast]) -> None:
        channel = self.channel_for(room_id)
        for broadcast in broadcasts:
            try:
                await self._transport.broadcast(channel, broadcast.event_name, broadcast.payload())
            except Exception:
                logger.exception(
                    "Failed to publish %s to %s",
                    broadcast.event_name,
                    channel,
                    extra={"room_id": room_id, "channel": channel},
                )

    @staticmethod
    def _session_of(command: RoomCommand) -> str:
        if isinstance(command, ParticipantJoined):
            return command.participant.session_id
        if isinstance(command, ExplicitCloseRequested):
            return command.requester_session_id
        return command.session_id

    async def _emit_command_events(
        self,
        room_id: str,
        command: RoomCommand,
        was_member: bool,
        coordinator: RoomCoordinator,
    ) -> None:
        session_id = self._session_of(command)
        if isinstance(command, ParticipantJoined) and not coordinator.is_closed:
            await self._emit_framework_event(
                "participant_joined",
                room_id=room_id,
                session_id=session_id,
                data={"rejoin": was_member},
            )
        elif isinstance(command, ParticipantLeft) and was_member:
            await self._emit_framework_event(
                "participant_left", room_id=room_id, session_id=session_id
            )
        elif isinstance(command, GraceExpired) and was_member and session_id not in coordinator:
            await self._emit_framework_event(
                "participant_removed", room_id=room_id, session_id=session_id
            )

    async def _emit_broadcast_event(self, broadcast: Broadcast) -> None:
        if isinstance(broadcast, HostPromoted):
            await self._emit_framework_event(
                "host_promoted",
                room_id=broadcast.room_id,
                session_id=broadcast.new_host_session_id,
                data={"previous_host_session_id": broadcast.previous_host_session_id},
            )
        elif isinstance(broadcast, RoomClosed):
            await self._emit_framework_event(
                "room_closed",
                room_id=broadcast.room_id,
                data={
                    "reason": str(broadcast.reason),
                    "closed_at": broadcast.closed_at.isoformat(),
                },
            )

    async def _emit_framework_event(
        self,
        event_type: str,
        room_id: str | None = None,
        session_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Emit a framework event to handlers registered for *event_type*."""
        fw_event = FrameworkEvent(
            type=event_type,
            room_id=room_id,
            session_id=session_id,
            data=data or {},
        )
        for filter_type, handler in self._event_handlers:
            if filter_type == fw_event.type:
                try:
                    await handler(fw_event)
                except Exception:
                    logger.exception(
                        "Framework event handler failed",
                        extra={"event_type": fw_event.type, "room_id": fw_event.room_id},
                    )
