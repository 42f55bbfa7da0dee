"""Booking schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from parkover.enums import (
    HISTORY_STATUSES,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    RESERVING_STATUSES,
    VehicleType,
)
from parkover.utils import ensure_utc, utcnow


class BookingCreate(BaseModel):
    """Booking details collected by the booking flow, submitted at payment time."""

    parking_id: str = Field(..., min_length=1, max_length=64)
    parking_name: str = Field(default="", max_length=255)
    parking_address: str = Field(default="", max_length=512)
    vehicle_id: str = Field(default="", max_length=64)
    vehicle_number: str = Field(default="", max_length=32)
    vehicle_type: VehicleType = VehicleType.FOUR_WHEELER
    floor_number: Optional[int] = None
    floor_name: str = Field(default="", max_length=64)
    spot_number: str = Field(default="", max_length=16)
    entry_time: datetime
    exit_time: datetime
    duration_hours: int = Field(default=1, ge=1)
    base_price: float = Field(default=0.0, ge=0)
    tax_amount: float = Field(default=0.0, ge=0)
    discount_amount: float = Field(default=0.0, ge=0)
    total_price: float = Field(default=0.0, ge=0)
    coupon_code: Optional[str] = Field(None, max_length=64)
    payment_method: PaymentMethod = PaymentMethod.UPI
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = Field(None, max_length=128)

    @field_validator("entry_time", "exit_time")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.exit_time <= self.entry_time:
            raise ValueError("exit_time must be after entry_time")
        if self.payment_status is None:
            # Simulated payment: cash is settled at the gate
            self.payment_status = (
                PaymentStatus.PENDING
                if self.payment_method == PaymentMethod.CASH
                else PaymentStatus.COMPLETED
            )
        return self


class BookingResponse(BaseModel):
    """Schema for booking response."""

    id: str
    user_id: str
    parking_id: str
    parking_name: str
    parking_address: str
    vehicle_id: str
    vehicle_number: str
    vehicle_type: VehicleType
    floor_number: Optional[int]
    floor_name: str
    spot_number: str
    entry_time: datetime
    exit_time: datetime
    actual_exit_time: Optional[datetime] = None
    duration_hours: int
    base_price: float
    tax_amount: float
    discount_amount: float
    total_price: float
    extra_charges: float = 0.0
    coupon_code: Optional[str] = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    booking_status: BookingStatus
    transaction_id: Optional[str] = None
    qr_code_data: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("entry_time", "exit_time", "actual_exit_time", "created_at", "updated_at")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    def is_ongoing(self, now: datetime = None) -> bool:
        now = now or utcnow()
        if self.booking_status == BookingStatus.CONFIRMED:
            return True
        return self.booking_status == BookingStatus.ACTIVE and now < self.exit_time

    def is_past(self) -> bool:
        return self.booking_status in HISTORY_STATUSES

    def holds_reservation(self) -> bool:
        return self.booking_status in RESERVING_STATUSES


class BookingStatusUpdate(BaseModel):
    """Schema for moving a booking to a new status."""

    status: BookingStatus
    at: Optional[datetime] = None

    @field_validator("at")
    @classmethod
    def normalize_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class SpotAvailabilityCheck(BaseModel):
    """Result of a spot/time-window conflict check."""

    parking_id: str
    spot_number: str
    check_in: datetime
    check_out: datetime
    available: bool


class PriceBreakdown(BaseModel):
    """Quoted price for a booking."""

    hourly_rate: float
    duration_hours: int
    price_multiplier: float = 1.0
    base_price: float
    tax_amount: float
    discount_amount: float = 0.0
    total_price: float
