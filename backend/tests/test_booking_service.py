"""
Tests for the booking engine: invariants, re-seating and broadcast on success.
"""

import json
import random

import pytest

from seatbooking.core.exceptions import SeatAlreadyOccupied, SeatNotFound
from seatbooking.services.booking_service import assign_seat, book_seat
from seatbooking.services.subscriber_hub import Subscriber


def occupancy(store) -> dict:
    return dict(store.list_seats())


@pytest.mark.asyncio
async def test_book_free_seat(store, hub):
    confirmation = await book_seat(store, hub, "1A", "Alice")
    assert confirmation.seat_id == "1A"
    assert confirmation.message == "Seat 1A booked successfully"
    assert store.get_occupant("1A") == "Alice"


@pytest.mark.asyncio
async def test_book_occupied_seat(store, hub):
    await book_seat(store, hub, "1A", "Alice")

    with pytest.raises(SeatAlreadyOccupied) as exc_info:
        await book_seat(store, hub, "1A", "Bob")

    assert exc_info.value.message == "Seat not available"
    assert exc_info.value.status_code == 400
    assert store.get_occupant("1A") == "Alice"


@pytest.mark.asyncio
async def test_rebooking_own_seat_is_rejected(store, hub):
    """No special case for the current occupant."""
    await book_seat(store, hub, "1A", "Alice")
    with pytest.raises(SeatAlreadyOccupied):
        await book_seat(store, hub, "1A", "Alice")
    assert store.get_occupant("1A") == "Alice"


@pytest.mark.asyncio
async def test_book_unknown_seat(store, hub):
    with pytest.raises(SeatNotFound) as exc_info:
        await book_seat(store, hub, "9Z", "Alice")
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_reseating_moves_occupant_with_one_broadcast(store, hub, make_connection):
    """Booking 2A for Alice frees 1A; viewers get a single snapshot with both changes."""
    await book_seat(store, hub, "1A", "Alice")

    connection = make_connection()
    await hub.subscribe(Subscriber(connection))

    confirmation = await book_seat(store, hub, "2A", "Alice")

    assert confirmation.released_seats == ["1A"]
    assert store.get_occupant("1A") is None
    assert store.get_occupant("2A") == "Alice"

    assert len(connection.sent) == 1
    pushed = {seat["seatNumber"]: seat["occupant"] for seat in json.loads(connection.sent[0])}
    assert pushed["1A"] is None
    assert pushed["2A"] == "Alice"


@pytest.mark.asyncio
async def test_failed_booking_does_not_broadcast(store, hub, make_connection):
    await book_seat(store, hub, "1A", "Alice")
    connection = make_connection()
    await hub.subscribe(Subscriber(connection))

    with pytest.raises(SeatAlreadyOccupied):
        await book_seat(store, hub, "1A", "Bob")
    with pytest.raises(SeatNotFound):
        await book_seat(store, hub, "9Z", "Bob")

    assert connection.sent == []


def test_occupant_holds_at_most_one_seat(store):
    """Random booking sequences never give anyone two seats."""
    rng = random.Random(7)
    seats = [seat_id for seat_id, _ in store.list_seats()] + ["9Z"]
    names = ["Alice", "Bob", "Carol", "Dave", "Erin"]

    for _ in range(200):
        try:
            assign_seat(store, rng.choice(seats), rng.choice(names))
        except (SeatAlreadyOccupied, SeatNotFound):
            pass

        held = [occupant for occupant in occupancy(store).values() if occupant is not None]
        assert len(held) == len(set(held))
