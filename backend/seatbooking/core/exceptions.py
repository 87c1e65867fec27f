"""
Error taxonomy for the seat booking service.

Booking errors surface as HTTP 400 with the reason text; routing errors as
HTTP 404. Handlers live in seatbooking.api.errors.
"""

from typing import Optional

from fastapi import status


class SeatBookingError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SeatNotFound(SeatBookingError):
    """The seat id is not part of the partition's seeded layout."""

    default_message = "Seat not found"

    def __init__(self, seat_id: str):
        self.seat_id = seat_id
        super().__init__()


class SeatAlreadyOccupied(SeatBookingError):
    """The seat already has an occupant (including the requester)."""

    default_message = "Seat not available"

    def __init__(self, seat_id: str):
        self.seat_id = seat_id
        super().__init__()


class FlightIdentifierMissing(SeatBookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Flight ID not found"


class RouteNotFound(SeatBookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
