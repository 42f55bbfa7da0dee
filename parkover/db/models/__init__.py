"""Database models package."""

from parkover.db.base import Base
from parkover.db.models.booking import Booking
from parkover.db.models.parking_availability import ParkingAvailability
from parkover.db.models.vehicle import Vehicle

__all__ = [
    "Base",
    "Booking",
    "ParkingAvailability",
    "Vehicle",
]
