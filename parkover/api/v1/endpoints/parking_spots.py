"""ParkingSpot endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from parkover.api.deps import get_services, unwrap
from parkover.container import Services
from parkover.enums import VehicleType
from parkover.schemas.availability import AvailabilityResponse
from parkover.schemas.booking import PriceBreakdown
from parkover.schemas.floor import FloorGrid
from parkover.schemas.parking_spot import ParkingSpot
from parkover.services.pricing import quote

router = APIRouter()


def _get_spot_or_404(services: Services, spot_id: str) -> ParkingSpot:
    spot = services.projector.get_spot(spot_id) or services.catalog.get(spot_id)
    if not spot:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Parking spot with id {spot_id} not found",
        )
    return spot


@router.get("/", response_model=List[ParkingSpot])
async def list_parking_spots(
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Search origin latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Search origin longitude"),
    radius_km: Optional[float] = Query(None, gt=0, description="Search radius in kilometres"),
    services: Services = Depends(get_services),
):
    """List parking spots with live availability, optionally nearest-first around a point."""
    if (lat is None) != (lng is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="lat and lng must be given together",
        )
    if lat is not None:
        return services.projector.spots_near(lat, lng, radius_km)
    return services.projector.latest or []


@router.get("/{spot_id}", response_model=ParkingSpot)
async def get_parking_spot(
    spot_id: str,
    services: Services = Depends(get_services),
):
    """Get a parking spot with live availability."""
    return _get_spot_or_404(services, spot_id)


@router.get("/{spot_id}/availability", response_model=AvailabilityResponse)
async def get_spot_availability(
    spot_id: str,
    services: Services = Depends(get_services),
):
    """Get the raw availability counters of a parking spot."""
    record = unwrap(await services.availability.get(spot_id))
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Availability for parking spot {spot_id} not found",
        )
    return record


@router.get("/{spot_id}/floors", response_model=List[FloorGrid])
async def get_spot_floors(
    spot_id: str,
    vehicle_type: VehicleType = Query(VehicleType.FOUR_WHEELER),
    services: Services = Depends(get_services),
):
    """Floor grids with booked and occupied cells for spot selection."""
    return unwrap(await services.bookings.get_floors_with_spots(spot_id, vehicle_type))


@router.get("/{spot_id}/quote", response_model=PriceBreakdown)
async def get_price_quote(
    spot_id: str,
    vehicle_type: VehicleType = Query(VehicleType.FOUR_WHEELER),
    duration_hours: int = Query(1, ge=1),
    floor_number: Optional[int] = Query(None),
    discount: float = Query(0.0, ge=0),
    services: Services = Depends(get_services),
):
    """Quote the price of parking at a spot."""
    spot = _get_spot_or_404(services, spot_id)
    return quote(spot, vehicle_type, duration_hours, floor_number=floor_number, discount=discount)
