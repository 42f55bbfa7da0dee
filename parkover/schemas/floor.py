"""Floor and spot grid schemas for spot selection."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from parkover.enums import VehicleType
from parkover.utils import ensure_utc


class SpotCell(BaseModel):
    """One synthesized spot on a floor grid."""

    id: str
    spot_number: str
    floor_number: int
    row: int
    column: int = Field(..., ge=0, le=1)  # 0 = left, 1 = right
    vehicle_type: VehicleType = VehicleType.FOUR_WHEELER
    is_available: bool = True
    is_booked: bool = False
    booked_until: Optional[datetime] = None

    def is_available_for(self, check_in: datetime, check_out: datetime) -> bool:
        """Free cells always qualify; a booked cell frees up at ``booked_until``."""
        if self.is_available:
            return True
        if not self.is_booked or self.booked_until is None:
            return False
        return ensure_utc(check_in) >= ensure_utc(self.booked_until)


class FloorGrid(BaseModel):
    """Floor with its spot cells and counts."""

    floor_number: int
    name: str
    total_spots: int
    available_spots: int
    spots: List[SpotCell] = Field(default_factory=list)
