"""
Subscriber hub: live WebSocket viewers of one flight's seat map.

Broadcast strategy:
  - The snapshot is read and JSON-encoded once per broadcast
  - The identical payload is sent to every open subscriber concurrently
  - A failed or slow send is logged and counted, never raised; the transport
    layer reports the close and the route handler unsubscribes the connection
"""

import asyncio
import enum
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol

from seatbooking.core.logging import get_logger
from seatbooking.core.metrics import open_subscribers, record_delivery
from seatbooking.services.seat_store import SeatStore

logger = get_logger(__name__)


class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...


class SubscriberState(str, enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(eq=False)
class Subscriber:
    connection: Connection
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: SubscriberState = SubscriberState.CONNECTING

    def mark_open(self) -> None:
        if self.state is not SubscriberState.CONNECTING:
            raise RuntimeError(f"Subscriber {self.id} cannot open from state {self.state.value}")
        self.state = SubscriberState.OPEN

    def mark_closed(self) -> None:
        self.state = SubscriberState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is SubscriberState.OPEN


def encode_snapshot(seats: list[tuple[str, Any]]) -> str:
    return json.dumps([{"seatNumber": seat_id, "occupant": occupant} for seat_id, occupant in seats])


class SubscriberHub:
    def __init__(self, store: SeatStore, send_timeout: float = 5.0, snapshot_on_connect: bool = False):
        self.store = store
        self.send_timeout = send_timeout
        self.snapshot_on_connect = snapshot_on_connect
        self._subscribers: set[Subscriber] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    @property
    def subscribers(self) -> frozenset[Subscriber]:
        return frozenset(self._subscribers)

    async def subscribe(self, subscriber: Subscriber) -> None:
        """Register an accepted connection. Pushes a snapshot only if configured to."""
        subscriber.mark_open()
        self._subscribers.add(subscriber)
        open_subscribers.inc()
        logger.info("subscriber_opened", subscriber_id=subscriber.id, subscribers=len(self._subscribers))

        if self.snapshot_on_connect:
            await self._deliver(subscriber, encode_snapshot(self.store.list_seats()))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Called once the transport reports the connection closed."""
        subscriber.mark_closed()
        if subscriber in self._subscribers:
            self._subscribers.discard(subscriber)
            open_subscribers.dec()
            logger.info("subscriber_closed", subscriber_id=subscriber.id, subscribers=len(self._subscribers))

    async def broadcast(self) -> int:
        """
        Push the current snapshot to every open subscriber.
        Returns the number of successful deliveries.
        """
        payload = encode_snapshot(self.store.list_seats())
        targets = [s for s in list(self._subscribers) if s.is_open]
        if not targets:
            return 0

        results = await asyncio.gather(*(self._deliver(s, payload) for s in targets))
        delivered = sum(results)
        logger.debug("snapshot_broadcast", targets=len(targets), delivered=delivered)
        return delivered

    async def _deliver(self, subscriber: Subscriber, payload: str) -> bool:
        try:
            await asyncio.wait_for(subscriber.connection.send_text(payload), timeout=self.send_timeout)
        except Exception as e:
            # Best-effort: a dead or slow viewer must not affect the others
            logger.debug("snapshot_delivery_failed", subscriber_id=subscriber.id, error=repr(e))
            record_delivery(False)
            return False
        record_delivery(True)
        return True
