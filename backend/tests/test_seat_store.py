"""
Tests for the partition state store: seeding, point reads/writes, durability.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from seatbooking.core.exceptions import SeatNotFound
from seatbooking.services import seat_store as seat_store_module
from seatbooking.db.session import create_partition_engine, partition_db_path
from seatbooking.services.seat_store import SeatStore, seat_layout

FLIGHT_ID = "LH-2024"


def reopen(settings) -> SeatStore:
    return SeatStore(
        create_partition_engine(settings, FLIGHT_ID),
        rows=settings.SEAT_ROWS,
        columns=settings.SEAT_COLUMNS,
    )


def test_seat_layout_default_is_sixty_seats():
    """10 rows x 6 columns, row-major, lettered A..F."""
    seats = seat_layout(10, 6)
    assert len(seats) == 60
    assert seats[:7] == ["1A", "1B", "1C", "1D", "1E", "1F", "2A"]
    assert seats[-1] == "10F"
    assert len(set(seats)) == 60


def test_initialize_seeds_empty_seats(store):
    """Fresh partition has every seat, in seed order, unoccupied."""
    seats = store.list_seats()
    assert [seat_id for seat_id, _ in seats] == seat_layout(2, 6)
    assert all(occupant is None for _, occupant in seats)


def test_initialize_twice_keeps_bookings(store, settings):
    """Second initialize() detects the table and does not reseed."""
    store.set_occupant("1A", "Alice")
    before = store.list_seats()

    assert store.initialize() is False

    second = reopen(settings)
    assert second.initialize() is False
    assert second.list_seats() == before
    assert len(second.list_seats()) == 12
    second.close()


def test_bookings_survive_restart(store, settings):
    """Disposing the engine and reopening the same file keeps occupancy."""
    store.set_occupant("2C", "Carol")
    store.close()

    restarted = reopen(settings)
    restarted.initialize()
    assert restarted.get_occupant("2C") == "Carol"
    restarted.close()


def test_get_occupant(store):
    assert store.get_occupant("1B") is None
    store.set_occupant("1B", "Bob")
    assert store.get_occupant("1B") == "Bob"


def test_get_occupant_unknown_seat(store):
    with pytest.raises(SeatNotFound) as exc_info:
        store.get_occupant("9Z")
    assert exc_info.value.seat_id == "9Z"


def test_set_occupant_unknown_seat(store):
    with pytest.raises(SeatNotFound):
        store.set_occupant("9Z", "Zed")


def test_set_occupant_to_empty(store):
    store.set_occupant("1C", "Carol")
    store.set_occupant("1C", None)
    assert store.get_occupant("1C") is None


def test_clear_occupant_releases_held_seat(store):
    store.set_occupant("1D", "Dave")
    assert store.clear_occupant("Dave") == ["1D"]
    assert store.get_occupant("1D") is None


def test_clear_occupant_without_seat(store):
    assert store.clear_occupant("Nobody") == []


def test_flight_ids_map_to_distinct_files(settings):
    first = partition_db_path(settings.DATA_DIR, "LH-2024")
    second = partition_db_path(settings.DATA_DIR, "LH-2025")
    assert first != second
    assert first == partition_db_path(settings.DATA_DIR, "LH-2024")
    # Path separators in the flight id never escape DATA_DIR
    assert partition_db_path(settings.DATA_DIR, "../../etc/passwd").parent == first.parent


def test_failed_seeding_is_retried(settings, monkeypatch):
    """A seed insert that fails rolls back the table, so the next start seeds again."""
    fresh = SeatStore(
        create_partition_engine(settings, "BA-0117"),
        rows=settings.SEAT_ROWS,
        columns=settings.SEAT_COLUMNS,
    )
    monkeypatch.setattr(seat_store_module, "seat_layout", lambda rows, columns: ["1A", "1A"])
    with pytest.raises(IntegrityError):
        fresh.initialize()

    monkeypatch.undo()
    assert fresh.initialize() is True
    assert [seat_id for seat_id, _ in fresh.list_seats()] == seat_layout(2, 6)
    fresh.close()
