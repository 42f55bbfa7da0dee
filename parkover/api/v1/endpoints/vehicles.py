"""Vehicle endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from parkover.api.deps import bind_user, get_services, unwrap
from parkover.container import Services
from parkover.schemas.parking_spot import PresetVehicle
from parkover.schemas.vehicle import VehicleCreate, VehicleResponse

router = APIRouter()


@router.get("/", response_model=List[VehicleResponse])
async def list_vehicles(
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """List the caller's vehicles, default first."""
    return unwrap(await services.vehicles.list_for_user())


@router.post("/", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Register a vehicle for the caller."""
    return unwrap(await services.vehicles.add(vehicle_data))


@router.get("/presets", response_model=List[PresetVehicle])
async def list_preset_vehicles(services: Services = Depends(get_services)):
    """Common vehicles offered as quick picks."""
    return await services.vehicles.presets()


@router.post("/{vehicle_id}/default", response_model=VehicleResponse)
async def set_default_vehicle(
    vehicle_id: UUID,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Make a vehicle the caller's default."""
    return unwrap(await services.vehicles.set_default(vehicle_id))


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: UUID,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Delete one of the caller's vehicles."""
    unwrap(await services.vehicles.delete(vehicle_id))
