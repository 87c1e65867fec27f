"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from seatbooking.api.routes import seats

api_router = APIRouter()
api_router.include_router(seats.router)
