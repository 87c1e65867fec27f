"""
Seat Booking API - Main Application Entry Point

A per-flight seat reservation service demonstrating:
- Single-writer partitions: one mailbox and worker per flight, no locks
- One seat per passenger, enforced inside the partition
- Live seat maps pushed to WebSocket subscribers on every booking
- Durable per-flight SQLite storage, seeded once
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seatbooking.core.config import get_settings
from seatbooking.core.logging import setup_logging, get_logger
from seatbooking.core.metrics import metrics_endpoint
from seatbooking.api.errors import register_exception_handlers
from seatbooking.api.router import api_router
from seatbooking.api.middleware import RequestLoggingMiddleware
from seatbooking.services.partition import PartitionRegistry

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)
    current = get_settings()

    logger.info(
        "application_starting",
        app=current.APP_NAME,
        version=current.APP_VERSION,
        environment=current.ENVIRONMENT,
        data_dir=current.DATA_DIR,
    )

    app.state.partitions = PartitionRegistry(current)

    yield

    # Cleanup
    await app.state.partitions.close()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Per-flight seat booking with live seat map updates",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Routes
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    partitions = getattr(app.state, "partitions", None)
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "partitions": len(partitions) if partitions is not None else 0,
    }


@app.get("/metrics", tags=["Health"])
def metrics():
    return metrics_endpoint()
