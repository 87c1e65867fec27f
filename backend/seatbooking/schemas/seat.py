"""
Pydantic schemas for seat-related request/response validation.

Field names follow the public wire format (camelCase). Seat ids are not
length-checked here: unknown ids are the booking engine's SeatNotFound.
"""

from typing import Optional
from pydantic import BaseModel


class BookSeatRequest(BaseModel):
    seatNumber: str
    name: str


class SeatResponse(BaseModel):
    seatNumber: str
    occupant: Optional[str] = None
