"""Booking model."""

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Index, Integer, String
from sqlalchemy.sql import func

from parkover.db.base import Base
from parkover.enums import BookingStatus, PaymentMethod, PaymentStatus, VehicleType, sql_in


class Booking(Base):
    """A reservation of one spot for a time window. Rows are never deleted."""

    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    parking_id = Column(String(64), nullable=False)
    # Denormalized for display without a catalog lookup
    parking_name = Column(String(255), nullable=False, default="")
    parking_address = Column(String(512), nullable=False, default="")
    vehicle_id = Column(String(64), nullable=False, default="")
    vehicle_number = Column(String(32), nullable=False, default="")
    vehicle_type = Column(String(16), nullable=False)

    floor_number = Column(Integer, nullable=True)
    floor_name = Column(String(64), nullable=False, default="")
    spot_number = Column(String(16), nullable=False, default="")

    # Reserved window [entry_time, exit_time)
    entry_time = Column(DateTime(timezone=True), nullable=False)
    exit_time = Column(DateTime(timezone=True), nullable=False)
    actual_exit_time = Column(DateTime(timezone=True), nullable=True)
    duration_hours = Column(Integer, nullable=False, default=1)

    base_price = Column(Float, nullable=False, default=0.0)
    tax_amount = Column(Float, nullable=False, default=0.0)
    discount_amount = Column(Float, nullable=False, default=0.0)
    total_price = Column(Float, nullable=False, default=0.0)
    extra_charges = Column(Float, nullable=False, default=0.0)  # overstay
    coupon_code = Column(String(64), nullable=True)

    payment_method = Column(String(16), nullable=False)
    payment_status = Column(String(16), nullable=False)
    booking_status = Column(String(16), nullable=False)
    transaction_id = Column(String(128), nullable=True)
    qr_code_data = Column(String(255), nullable=False, default="")
    # Bumped on every UPDATE so concurrent status changes cannot both apply
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(f"vehicle_type IN ({sql_in(VehicleType)})", name="check_vehicle_type"),
        CheckConstraint(f"payment_method IN ({sql_in(PaymentMethod)})", name="check_payment_method"),
        CheckConstraint(f"payment_status IN ({sql_in(PaymentStatus)})", name="check_payment_status"),
        CheckConstraint(f"booking_status IN ({sql_in(BookingStatus)})", name="check_booking_status"),
        Index("ix_bookings_spot_status", "parking_id", "spot_number", "booking_status"),
        Index("ix_bookings_floor_status", "parking_id", "floor_number", "booking_status"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Booking(id={self.id}, spot={self.spot_number}, status={self.booking_status})>"
