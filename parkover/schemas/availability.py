"""ParkingAvailability schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from parkover.enums import VehicleType
from parkover.schemas.parking_spot import ParkingSpot
from parkover.utils import ensure_utc

COUNTER_FIELDS = {
    VehicleType.TWO_WHEELER: "available_spots_two_wheeler",
    VehicleType.FOUR_WHEELER: "available_spots_four_wheeler",
    VehicleType.HEAVY: "available_spots_heavy",
}


class AvailabilityResponse(BaseModel):
    """Snapshot of a spot's live counters."""

    spot_id: str
    available_spots_two_wheeler: int = 0
    available_spots_four_wheeler: int = 0
    available_spots_heavy: int = 0
    floor_availability: Dict[str, int] = Field(default_factory=dict)
    last_updated: datetime

    model_config = {"from_attributes": True}

    @field_validator("last_updated")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def available_for(self, vehicle_type: VehicleType) -> int:
        return getattr(self, COUNTER_FIELDS[vehicle_type])


class AvailabilityUpdate(BaseModel):
    """Fields a transaction may write on an availability record.

    Only fields explicitly set are applied (``exclude_unset``).
    """

    available_spots_two_wheeler: Optional[int] = Field(None, ge=0)
    available_spots_four_wheeler: Optional[int] = Field(None, ge=0)
    available_spots_heavy: Optional[int] = Field(None, ge=0)
    floor_availability: Optional[Dict[str, int]] = None
    last_updated: Optional[datetime] = None

    @classmethod
    def for_counter(cls, vehicle_type: VehicleType, value: int, **extra) -> "AvailabilityUpdate":
        return cls(**{COUNTER_FIELDS[vehicle_type]: value}, **extra)


class Capacities(BaseModel):
    """Per-class totals used to clamp releases; optional per-floor totals."""

    two_wheeler: int = Field(..., ge=0)
    four_wheeler: int = Field(..., ge=0)
    heavy: int = Field(..., ge=0)
    floors: Dict[str, int] = Field(default_factory=dict)

    def for_type(self, vehicle_type: VehicleType) -> int:
        return {
            VehicleType.TWO_WHEELER: self.two_wheeler,
            VehicleType.FOUR_WHEELER: self.four_wheeler,
            VehicleType.HEAVY: self.heavy,
        }[vehicle_type]

    @classmethod
    def from_spot(cls, spot: ParkingSpot) -> "Capacities":
        return cls(
            two_wheeler=spot.total_spots_two_wheeler,
            four_wheeler=spot.total_spots_four_wheeler,
            heavy=spot.total_spots_heavy,
            floors={str(floor.floor_number): floor.total_spots for floor in spot.floors},
        )
