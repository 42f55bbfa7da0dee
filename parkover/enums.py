"""Enumerations shared by the ORM models and the pydantic schemas."""

from enum import Enum


class VehicleType(str, Enum):
    TWO_WHEELER = "TWO_WHEELER"
    FOUR_WHEELER = "FOUR_WHEELER"
    HEAVY = "HEAVY"


class BookingStatus(str, Enum):
    PENDING = "PENDING"  # created, payment pending
    CONFIRMED = "CONFIRMED"  # paid, waiting for entry
    ACTIVE = "ACTIVE"  # currently parked
    COMPLETED = "COMPLETED"  # exited
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"  # never confirmed


class PaymentMethod(str, Enum):
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"
    CARD = "CARD"
    CASH = "CASH"  # pay at parking


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    LIMITED = "LIMITED"
    FULL = "FULL"


# Bookings in these states hold a reserved counter and block the spot/time window.
RESERVING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.ACTIVE)
ONGOING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.ACTIVE)
HISTORY_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)
# Moving from a reserving status into one of these gives the counter back.
RELEASING_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


def sql_in(enum_cls) -> str:
    """Render an enum's values as a SQL IN list for check constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
