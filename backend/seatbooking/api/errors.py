"""
Exception handlers: map the error taxonomy onto HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from seatbooking.core.exceptions import FlightIdentifierMissing, RouteNotFound, SeatBookingError
from seatbooking.core.logging import get_logger

logger = get_logger(__name__)


async def seat_booking_error_handler(request: Request, exc: SeatBookingError) -> PlainTextResponse:
    logger.warning(
        "request_rejected",
        error=type(exc).__name__,
        reason=exc.message,
        status_code=exc.status_code,
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are a client error, not a crash."""
    logger.warning("request_validation_failed", errors=jsonable_errors(exc))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods are both "no such route"
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        if "flightId" not in request.query_params:
            return await seat_booking_error_handler(request, FlightIdentifierMissing())
        return await seat_booking_error_handler(request, RouteNotFound())
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SeatBookingError, seat_booking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
