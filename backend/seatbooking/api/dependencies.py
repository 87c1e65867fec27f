"""
Request-to-partition resolution.

Both dependencies are coroutines so they run on the event loop, never in the
threadpool: PartitionRegistry.get relies on that to create each flight once.

The flight id travels as the `flightId` query parameter on every
flight-scoped request, including WebSocket upgrades.
"""

from typing import Optional

from fastapi import Depends, Query
from starlette.requests import HTTPConnection

from seatbooking.core.exceptions import FlightIdentifierMissing
from seatbooking.services.partition import PartitionRegistry, SeatPartition


async def get_registry(connection: HTTPConnection) -> PartitionRegistry:
    return connection.app.state.partitions


async def get_partition(
    flightId: Optional[str] = Query(None),
    registry: PartitionRegistry = Depends(get_registry),
) -> SeatPartition:
    if not flightId:
        raise FlightIdentifierMissing()
    return registry.get(flightId)
