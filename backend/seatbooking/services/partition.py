"""
Flight partitions: one single-writer actor per flight id.

Each partition owns a seat store, a subscriber hub and a mailbox. A single
worker task drains the mailbox, awaiting each message to completion before
taking the next, so bookings, snapshot reads and subscription changes for one
flight are strictly serialized. Different flights have separate workers and
run independently.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from seatbooking.core.config import Settings
from seatbooking.core.logging import get_logger
from seatbooking.core.metrics import active_partitions
from seatbooking.db.session import create_partition_engine
from seatbooking.services.booking_service import BookingConfirmation, book_seat
from seatbooking.services.seat_store import SeatStore
from seatbooking.services.subscriber_hub import Subscriber, SubscriberHub

logger = get_logger(__name__)

Operation = Callable[[], Awaitable[Any]]


def _mark_retrieved(future: asyncio.Future) -> None:
    # The caller may have gone away; a rejected booking is not an unhandled error
    if not future.cancelled():
        future.exception()


class SeatPartition:
    def __init__(self, flight_id: str, store: SeatStore, hub: SubscriberHub):
        self.flight_id = flight_id
        self.store = store
        self.hub = hub
        self._mailbox: asyncio.Queue[tuple[Operation, asyncio.Future]] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    def open(cls, flight_id: str, settings: Settings) -> "SeatPartition":
        """Create the partition's storage and seed it on first use."""
        store = SeatStore(
            create_partition_engine(settings, flight_id),
            rows=settings.SEAT_ROWS,
            columns=settings.SEAT_COLUMNS,
        )
        store.initialize()
        hub = SubscriberHub(
            store,
            send_timeout=settings.SUBSCRIBER_SEND_TIMEOUT,
            snapshot_on_connect=settings.SNAPSHOT_ON_CONNECT,
        )
        return cls(flight_id, store, hub)

    async def _run(self) -> None:
        """Single worker: processes one message at a time."""
        while True:
            operation, result_future = await self._mailbox.get()
            try:
                result = await operation()
            except asyncio.CancelledError:
                result_future.cancel()
                raise
            except Exception as e:
                if not result_future.done():
                    result_future.set_exception(e)
            else:
                if not result_future.done():
                    result_future.set_result(result)
            finally:
                self._mailbox.task_done()

    async def _submit(self, operation: Operation) -> Any:
        if self._closed:
            raise RuntimeError(f"Partition {self.flight_id} is closed")
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name=f"partition:{self.flight_id}")

        result_future = asyncio.get_running_loop().create_future()
        result_future.add_done_callback(_mark_retrieved)
        await self._mailbox.put((operation, result_future))
        # Shield: a caller that goes away does not cancel the queued message
        return await asyncio.shield(result_future)

    async def snapshot(self) -> list[tuple[str, Optional[str]]]:
        async def _snapshot():
            return self.store.list_seats()
        return await self._submit(_snapshot)

    async def book(self, seat_id: str, occupant: str) -> BookingConfirmation:
        async def _book():
            return await book_seat(self.store, self.hub, seat_id, occupant)
        return await self._submit(_book)

    async def subscribe(self, subscriber: Subscriber) -> None:
        async def _subscribe():
            await self.hub.subscribe(subscriber)
        await self._submit(_subscribe)

    async def unsubscribe(self, subscriber: Subscriber) -> None:
        if self._closed:
            # Shutdown already dropped every subscriber
            subscriber.mark_closed()
            return

        async def _unsubscribe():
            self.hub.unsubscribe(subscriber)
        await self._submit(_unsubscribe)

    async def close(self) -> None:
        self._closed = True
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        while not self._mailbox.empty():
            _, result_future = self._mailbox.get_nowait()
            if not result_future.done():
                result_future.set_exception(RuntimeError(f"Partition {self.flight_id} is closed"))
        for subscriber in self.hub.subscribers:
            self.hub.unsubscribe(subscriber)
        self.store.close()


class PartitionRegistry:
    """
    Maps flight ids to partitions, creating them lazily.

    get() must be called from the event loop thread. It does not await, so two
    requests for a new flight cannot both create (and seed) a partition.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._partitions: dict[str, SeatPartition] = {}

    def __len__(self) -> int:
        return len(self._partitions)

    def __contains__(self, flight_id: str) -> bool:
        return flight_id in self._partitions

    def get(self, flight_id: str) -> SeatPartition:
        partition = self._partitions.get(flight_id)
        if partition is None:
            partition = SeatPartition.open(flight_id, self.settings)
            self._partitions[flight_id] = partition
            active_partitions.inc()
            logger.info("partition_loaded", flight_id=flight_id, partitions=len(self._partitions))
        return partition

    async def close(self) -> None:
        partitions = list(self._partitions.values())
        self._partitions.clear()
        for partition in partitions:
            await partition.close()
            active_partitions.dec()
        logger.info("partitions_closed", count=len(partitions))
