"""
Partition state store: the durable seat table of one flight.

Every operation here is synchronous. The partition worker calls them back to
back without awaiting in between, so a read followed by a write can never be
interleaved with another request for the same flight.
"""

import string
from typing import Optional

from sqlalchemy import Engine, insert, inspect, literal_column, select, update
from sqlalchemy.orm import Session, sessionmaker

from seatbooking.core.exceptions import SeatNotFound
from seatbooking.core.logging import get_logger
from seatbooking.db.session import create_session_factory
from seatbooking.models.seat import Seat

logger = get_logger(__name__)


def seat_layout(rows: int, columns: int) -> list[str]:
    """Seat ids in row-major order: 1A, 1B, ... 2A, ..."""
    letters = string.ascii_uppercase[:columns]
    return [f"{row}{letter}" for row in range(1, rows + 1) for letter in letters]


class SeatStore:
    def __init__(self, engine: Engine, rows: int, columns: int):
        self.engine = engine
        self.rows = rows
        self.columns = columns
        self._session_factory: sessionmaker[Session] = create_session_factory(engine)

    def initialize(self) -> bool:
        """
        Create and seed the seat table unless it already exists.
        Returns True when seeding happened. Existing bookings are never touched.
        """
        seat_ids = seat_layout(self.rows, self.columns)
        # Table creation and seeding commit together: a failed seed leaves no table
        with self.engine.begin() as conn:
            if inspect(conn).has_table(Seat.__tablename__):
                logger.info("seat_table_exists", url=str(self.engine.url))
                return False

            Seat.__table__.create(conn)
            conn.execute(insert(Seat), [{"seat_id": seat_id, "occupant": None} for seat_id in seat_ids])

        logger.info("seat_table_seeded", seats=len(seat_ids), rows=self.rows, columns=self.columns)
        return True

    def get_occupant(self, seat_id: str) -> Optional[str]:
        """Return the seat's occupant (None if free). Raises SeatNotFound."""
        with self._session_factory() as session:
            seat = session.get(Seat, seat_id)
            if seat is None:
                raise SeatNotFound(seat_id)
            return seat.occupant

    def set_occupant(self, seat_id: str, occupant: Optional[str]) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(
                update(Seat).where(Seat.seat_id == seat_id).values(occupant=occupant)
            )
            if result.rowcount == 0:
                raise SeatNotFound(seat_id)

    def clear_occupant(self, occupant: str) -> list[str]:
        """Free every seat held by `occupant`. Returns the seat ids released."""
        with self._session_factory.begin() as session:
            released = list(
                session.scalars(select(Seat.seat_id).where(Seat.occupant == occupant))
            )
            if released:
                session.execute(
                    update(Seat).where(Seat.occupant == occupant).values(occupant=None)
                )
            return released

    def list_seats(self) -> list[tuple[str, Optional[str]]]:
        """Full snapshot in seed order."""
        with self._session_factory() as session:
            rows = session.execute(
                select(Seat.seat_id, Seat.occupant).order_by(literal_column("rowid"))
            )
            return [(seat_id, occupant) for seat_id, occupant in rows]

    def close(self) -> None:
        self.engine.dispose()
