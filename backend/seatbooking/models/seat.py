"""
Seat model: one row per seat in a flight partition.

Key design decisions:
- seat_id is the primary key, so seat identifiers are unique per partition
- occupant is a single nullable name; NULL means the seat is free
- Rows are seeded once and never inserted or deleted afterwards
"""

from typing import Optional

from sqlalchemy import String, Index
from sqlalchemy.orm import Mapped, mapped_column

from seatbooking.db.base import Base


class Seat(Base):
    __tablename__ = "seats"

    seat_id: Mapped[str] = mapped_column(String(8), primary_key=True)
    occupant: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        # clear_occupant looks seats up by occupant on every booking
        Index("ix_seats_occupant", "occupant"),
    )

    def __repr__(self) -> str:
        return f"<Seat(seat_id={self.seat_id}, occupant={self.occupant})>"
