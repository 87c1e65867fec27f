"""
Booking engine: assigns a free seat to an occupant.

CONCURRENCY STRATEGY: Single-writer partition
=============================================

Problem:
  Two passengers try to take seat 1A at the same moment.
  Both read "1A is free", both write their name, one silently wins.

Solution:
  Every request for a flight goes through that flight's partition mailbox
  (see partition.py), which runs one message at a time. Inside a booking the
  lookup, the validation and both writes are plain synchronous calls on the
  seat store with no `await` between them, so nothing else touching this
  flight can run between the check and the write.

  No row locks, no version columns, no retries: a booking either succeeds or
  fails deterministically with SeatNotFound / SeatAlreadyOccupied.

One seat per occupant:
  Before assigning, any seat the occupant already holds is released. Booking
  Alice into 2A while she sits in 1A moves her; subscribers receive a single
  snapshot that shows both changes.
"""

import time
from dataclasses import dataclass, field

from seatbooking.core.exceptions import SeatAlreadyOccupied, SeatNotFound
from seatbooking.core.logging import get_logger
from seatbooking.core.metrics import booking_latency, record_booking_attempt
from seatbooking.services.seat_store import SeatStore
from seatbooking.services.subscriber_hub import SubscriberHub

logger = get_logger(__name__)


@dataclass
class BookingConfirmation:
    seat_id: str
    occupant: str
    released_seats: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Seat {self.seat_id} booked successfully"


def assign_seat(store: SeatStore, seat_id: str, occupant: str) -> BookingConfirmation:
    """
    Check-and-write half of a booking. Synchronous on purpose: it must never
    yield control between reading the seat and assigning it.
    """
    start = time.perf_counter()
    try:
        current = store.get_occupant(seat_id)
    except SeatNotFound:
        logger.warning("booking_rejected_seat_not_found", seat_id=seat_id, occupant=occupant)
        record_booking_attempt("seat_not_found")
        raise

    if current is not None:
        logger.warning("booking_rejected_seat_occupied", seat_id=seat_id, occupant=occupant)
        record_booking_attempt("seat_occupied")
        raise SeatAlreadyOccupied(seat_id)

    released = store.clear_occupant(occupant)
    if released:
        logger.info("occupant_reseated", occupant=occupant, released=released, seat_id=seat_id)

    store.set_occupant(seat_id, occupant)

    booking_latency.observe(time.perf_counter() - start)
    record_booking_attempt("success")
    logger.info("seat_booked", seat_id=seat_id, occupant=occupant)
    return BookingConfirmation(seat_id=seat_id, occupant=occupant, released_seats=released)


async def book_seat(
    store: SeatStore,
    hub: SubscriberHub,
    seat_id: str,
    occupant: str,
) -> BookingConfirmation:
    """Book a seat and push the new snapshot to live subscribers."""
    confirmation = assign_seat(store, seat_id, occupant)
    await hub.broadcast()
    return confirmation
