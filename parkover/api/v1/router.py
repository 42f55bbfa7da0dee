"""API v1 router."""

from fastapi import APIRouter

from parkover.api.v1.endpoints import bookings, parking_spots, vehicles

api_router = APIRouter()

api_router.include_router(parking_spots.router, prefix="/parking-spots", tags=["parking-spots"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
