"""Schemas package."""

from parkover.schemas.availability import AvailabilityResponse, AvailabilityUpdate, Capacities
from parkover.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    PriceBreakdown,
    SpotAvailabilityCheck,
)
from parkover.schemas.floor import FloorGrid, SpotCell
from parkover.schemas.parking_spot import (
    Floor,
    OperatingHours,
    ParkingSpot,
    ParkingSpotsCatalog,
    PresetVehicle,
    VehicleCatalog,
)
from parkover.schemas.vehicle import VehicleCreate, VehicleResponse

__all__ = [
    "AvailabilityResponse",
    "AvailabilityUpdate",
    "Capacities",
    "BookingCreate",
    "BookingResponse",
    "BookingStatusUpdate",
    "PriceBreakdown",
    "SpotAvailabilityCheck",
    "FloorGrid",
    "SpotCell",
    "Floor",
    "OperatingHours",
    "ParkingSpot",
    "ParkingSpotsCatalog",
    "PresetVehicle",
    "VehicleCatalog",
    "VehicleCreate",
    "VehicleResponse",
]
