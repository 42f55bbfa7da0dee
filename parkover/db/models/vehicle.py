"""Vehicle model."""

from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, Uuid
from sqlalchemy.sql import func

from parkover.db.base import Base
from parkover.enums import VehicleType, sql_in


class Vehicle(Base):
    """A vehicle registered by a user."""

    __tablename__ = "vehicles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(128), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    number = Column(String(32), nullable=False)
    brand = Column(String(128), nullable=False, default="")
    model = Column(String(128), nullable=False, default="")
    color = Column(String(64), nullable=False, default="")
    photo_url = Column(String(512), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_preset = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(f"type IN ({sql_in(VehicleType)})", name="check_vehicle_type"),
    )

    def __repr__(self):
        return f"<Vehicle(id={self.id}, number={self.number}, type={self.type})>"
