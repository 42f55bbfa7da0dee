"""Catalog schemas: parking spots, floors and the vehicle catalog."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from parkover.enums import AvailabilityStatus, VehicleType


class CatalogModel(BaseModel):
    """Catalog JSON uses camelCase keys; Python code uses snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperatingHours(CatalogModel):
    """Opening hours in HH:mm, closed days as 0 (Sunday) to 6 (Saturday)."""

    is_24_hours: bool = Field(default=False, alias="is24Hours")
    open_time: str = Field(default="06:00", pattern=r"^\d{2}:\d{2}$")
    close_time: str = Field(default="22:00", pattern=r"^\d{2}:\d{2}$")
    closed_days: List[int] = Field(default_factory=list)


class Floor(CatalogModel):
    """A floor of a parking spot. ``available_spots`` is overlaid at render time."""

    floor_number: int
    name: str = ""
    total_spots: int = Field(default=0, ge=0)
    available_spots: Optional[int] = Field(default=None, ge=0)
    price_multiplier: float = Field(default=1.0, gt=0)

    @model_validator(mode="after")
    def default_to_full_floor(self):
        if self.available_spots is None:
            self.available_spots = self.total_spots
        return self


class ParkingSpot(CatalogModel):
    """Static catalog entry with availability fields overlaid from live counters."""

    id: str
    name: str = ""
    address: str = ""
    latitude: float = Field(default=0.0, ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)

    price_per_hour_two_wheeler: float = 0.0
    price_per_hour_four_wheeler: float = 0.0
    price_per_hour_heavy: float = 0.0
    price_per_day_two_wheeler: float = 0.0
    price_per_day_four_wheeler: float = 0.0
    price_per_day_heavy: float = 0.0

    total_spots_two_wheeler: int = Field(default=0, ge=0)
    total_spots_four_wheeler: int = Field(default=0, ge=0)
    total_spots_heavy: int = Field(default=0, ge=0)

    # Overlay fields; full capacity until live counters say otherwise
    available_spots_two_wheeler: Optional[int] = Field(default=None, ge=0)
    available_spots_four_wheeler: Optional[int] = Field(default=None, ge=0)
    available_spots_heavy: Optional[int] = Field(default=None, ge=0)

    floors: List[Floor] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    rating: float = 0.0
    review_count: int = 0
    operating_hours: OperatingHours = Field(default_factory=OperatingHours)
    is_active: bool = True

    @model_validator(mode="after")
    def default_to_full_capacity(self):
        if self.available_spots_two_wheeler is None:
            self.available_spots_two_wheeler = self.total_spots_two_wheeler
        if self.available_spots_four_wheeler is None:
            self.available_spots_four_wheeler = self.total_spots_four_wheeler
        if self.available_spots_heavy is None:
            self.available_spots_heavy = self.total_spots_heavy
        return self

    def total_for(self, vehicle_type: VehicleType) -> int:
        return {
            VehicleType.TWO_WHEELER: self.total_spots_two_wheeler,
            VehicleType.FOUR_WHEELER: self.total_spots_four_wheeler,
            VehicleType.HEAVY: self.total_spots_heavy,
        }[vehicle_type]

    def available_for(self, vehicle_type: VehicleType) -> int:
        return {
            VehicleType.TWO_WHEELER: self.available_spots_two_wheeler,
            VehicleType.FOUR_WHEELER: self.available_spots_four_wheeler,
            VehicleType.HEAVY: self.available_spots_heavy,
        }[vehicle_type]

    def hourly_price_for(self, vehicle_type: VehicleType) -> float:
        return {
            VehicleType.TWO_WHEELER: self.price_per_hour_two_wheeler,
            VehicleType.FOUR_WHEELER: self.price_per_hour_four_wheeler,
            VehicleType.HEAVY: self.price_per_hour_heavy,
        }[vehicle_type]

    def get_floor(self, floor_number: int) -> Optional[Floor]:
        for floor in self.floors:
            if floor.floor_number == floor_number:
                return floor
        return None

    def total_spots(self) -> int:
        return self.total_spots_two_wheeler + self.total_spots_four_wheeler + self.total_spots_heavy

    def total_available_spots(self) -> int:
        return (
            self.available_spots_two_wheeler
            + self.available_spots_four_wheeler
            + self.available_spots_heavy
        )

    def availability_status(self) -> AvailabilityStatus:
        total = self.total_spots()
        available = self.total_available_spots()
        if available == 0:
            return AvailabilityStatus.FULL
        if available / total < 0.2:
            return AvailabilityStatus.LIMITED
        return AvailabilityStatus.AVAILABLE


class Amenity(CatalogModel):
    id: str
    name: str
    icon: str = ""


class ParkingSpotsCatalog(CatalogModel):
    """Payload of the parking spots catalog document."""

    parking_spots: List[ParkingSpot] = Field(default_factory=list)
    amenities_master: List[Amenity] = Field(default_factory=list)


class VehicleTypeInfo(CatalogModel):
    type: VehicleType
    display_name: str = ""
    icon: str = ""


class Brand(CatalogModel):
    id: str
    name: str
    logo_url: str = ""
    vehicle_types: List[VehicleType] = Field(default_factory=list)


class PresetVehicle(CatalogModel):
    id: str
    type: VehicleType
    brand: str
    model: str
    image_url: str = ""


class VehicleColor(CatalogModel):
    name: str
    hex: str


class VehicleCatalog(CatalogModel):
    """Payload of the vehicles catalog document."""

    vehicle_types: List[VehicleTypeInfo] = Field(default_factory=list)
    brands: List[Brand] = Field(default_factory=list)
    preset_vehicles: List[PresetVehicle] = Field(default_factory=list)
    colors: List[VehicleColor] = Field(default_factory=list)
