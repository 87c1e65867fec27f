"""
Flight-scoped seat endpoints: snapshot, booking and live updates.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketException, status
from fastapi.responses import PlainTextResponse

from seatbooking.api.dependencies import get_partition, get_registry
from seatbooking.core.exceptions import FlightIdentifierMissing
from seatbooking.core.logging import get_logger
from seatbooking.schemas.seat import BookSeatRequest, SeatResponse
from seatbooking.services.partition import PartitionRegistry, SeatPartition
from seatbooking.services.subscriber_hub import Subscriber

logger = get_logger(__name__)
router = APIRouter(tags=["Seats"])


@router.get("/seats", response_model=list[SeatResponse])
async def list_seats(partition: SeatPartition = Depends(get_partition)):
    """Current occupancy of every seat on the flight."""
    seats = await partition.snapshot()
    return [SeatResponse(seatNumber=seat_id, occupant=occupant) for seat_id, occupant in seats]


@router.post("/book-seat", response_class=PlainTextResponse)
async def book_seat_endpoint(
    booking: BookSeatRequest,
    partition: SeatPartition = Depends(get_partition),
):
    """
    Assign a free seat to a passenger.

    A passenger who already holds another seat on this flight is moved.
    Occupied or unknown seats return 400 with the reason as plain text.
    """
    confirmation = await partition.book(booking.seatNumber, booking.name)
    return confirmation.message


async def get_ws_partition(
    flightId: Optional[str] = Query(None),
    registry: PartitionRegistry = Depends(get_registry),
) -> SeatPartition:
    if not flightId:
        raise WebSocketException(
            code=status.WS_1008_POLICY_VIOLATION,
            reason=FlightIdentifierMissing.default_message,
        )
    return registry.get(flightId)


@router.websocket("/{path:path}")
async def seat_updates(
    websocket: WebSocket,
    path: str,
    partition: SeatPartition = Depends(get_ws_partition),
):
    """
    Live seat map. An upgrade on any path subscribes to the flight named by
    flightId. Every successful booking pushes the full snapshot as JSON.
    Messages from the client are ignored.
    """
    subscriber = Subscriber(websocket)
    await websocket.accept()
    await partition.subscribe(subscriber)
    logger.info("websocket_connected", flight_id=partition.flight_id, subscriber_id=subscriber.id, path=f"/{path}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(
                    "websocket_disconnected",
                    flight_id=partition.flight_id,
                    subscriber_id=subscriber.id,
                    code=message.get("code"),
                )
                break
    finally:
        await partition.unsubscribe(subscriber)
