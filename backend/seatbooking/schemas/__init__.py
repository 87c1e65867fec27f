from seatbooking.schemas.seat import BookSeatRequest, SeatResponse

__all__ = ["BookSeatRequest", "SeatResponse"]
