"""Vehicle schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from parkover.enums import VehicleType


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""

    type: VehicleType = VehicleType.FOUR_WHEELER
    number: str = Field(..., min_length=1, max_length=32)
    brand: str = Field(default="", max_length=128)
    model: str = Field(default="", max_length=128)
    color: str = Field(default="", max_length=64)
    photo_url: Optional[str] = Field(None, max_length=512)
    is_default: bool = False

    @field_validator("number")
    @classmethod
    def normalize_number(cls, value: str) -> str:
        normalized = "".join(value.split()).upper()
        if not normalized:
            raise ValueError("vehicle number must not be blank")
        return normalized


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""

    id: UUID
    user_id: str
    type: VehicleType
    number: str
    brand: str
    model: str
    color: str
    photo_url: Optional[str] = None
    is_default: bool = False
    is_preset: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
