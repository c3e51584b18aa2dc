"""Host failover - automatic promotion when the host drops.

Demonstrates hostkit with the in-memory presence transport. Shows:
- A room opening when its first member subscribes
- Observing framework events with hub.on()
- The earliest-connected guest becoming host when the host leaves
- A guest rejoining inside the grace window
- The room closing when the last member is gone

Run with:
    uv run python examples/host_failover.py
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

from hostkit import (
    BroadcastMessage,
    FrameworkEvent,
    HubConfig,
    InMemoryPresenceTransport,
    Participant,
    RoomHub,
)

CHANNEL = "presence-room-DEMO1"
T0 = datetime(2024, 1, 1, tzinfo=UTC)


def member(session_id: str, name: str, offset: int) -> dict[str, object]:
    participant = Participant(
        session_id=session_id,
        display_name=name,
        connected_at=T0 + timedelta(seconds=offset),
    )
    return participant.to_presence_info()


async def main() -> None:
    transport = InMemoryPresenceTransport()
    hub = RoomHub(transport, config=HubConfig(grace_seconds=0.2))

    @hub.on("host_promoted")
    async def on_promoted(event: FrameworkEvent) -> None:
        print(f"  [event] {event.session_id} is now host")

    @hub.on("room_closed")
    async def on_closed(event: FrameworkEvent) -> None:
        print(f"  [event] room {event.room_id} closed ({event.data['reason']})")

    # --- Observe what clients on the channel would receive ---
    async def on_broadcast(message: BroadcastMessage) -> None:
        print(f"  [broadcast] {message.name} {message.payload}")

    await transport.subscribe(CHANNEL, on_broadcast)

    print("Alice, Bob and Carol join:")
    await transport.join(CHANNEL, "1.1", member("1.1", "Alice", 0))
    await transport.join(CHANNEL, "2.2", member("2.2", "Bob", 5))
    await transport.join(CHANNEL, "3.3", member("3.3", "Carol", 10))
    room = await hub.get_room("DEMO1")
    print(f"  host={room.host_session_id} members={room.member_count}")

    print("\nCarol's connection blips and comes back:")
    await transport.leave(CHANNEL, "3.3")
    await transport.join(CHANNEL, "3.3", member("3.3", "Carol", 10))
    await asyncio.sleep(0.3)
    print(f"  members={[p.display_name for p in hub.snapshot('DEMO1')]}")

    print("\nAlice (host) leaves:")
    await transport.leave(CHANNEL, "1.1")
    await asyncio.sleep(0.05)

    print("\nEveryone else leaves:")
    await transport.leave(CHANNEL, "2.2")
    await transport.leave(CHANNEL, "3.3")
    await asyncio.sleep(0.3)

    room = await hub.get_room("DEMO1")
    print(f"\nFinal state: {room.state}")

    await hub.close()


if __name__ == "__main__":
    asyncio.run(main())
