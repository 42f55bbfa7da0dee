"""Price quotes for bookings."""

from typing import Optional

from parkover.config import settings
from parkover.enums import VehicleType
from parkover.schemas.booking import PriceBreakdown
from parkover.schemas.parking_spot import ParkingSpot


def quote(
    spot: ParkingSpot,
    vehicle_type: VehicleType,
    duration_hours: int,
    floor_number: Optional[int] = None,
    discount: float = 0.0,
    tax_rate: float = None,
) -> PriceBreakdown:
    """Hourly rate x floor multiplier x hours, plus tax, minus discount."""
    if duration_hours < 1:
        raise ValueError("duration_hours must be at least 1")
    if tax_rate is None:
        tax_rate = settings.TAX_RATE

    hourly_rate = spot.hourly_price_for(vehicle_type)
    multiplier = 1.0
    if floor_number is not None:
        floor = spot.get_floor(floor_number)
        if floor is not None:
            multiplier = floor.price_multiplier

    base_price = round(hourly_rate * multiplier * duration_hours, 2)
    tax_amount = round(base_price * tax_rate, 2)
    discount_amount = round(min(max(discount, 0.0), base_price + tax_amount), 2)
    total_price = round(base_price + tax_amount - discount_amount, 2)

    return PriceBreakdown(
        hourly_rate=hourly_rate,
        duration_hours=duration_hours,
        price_multiplier=multiplier,
        base_price=base_price,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_price=total_price,
    )
