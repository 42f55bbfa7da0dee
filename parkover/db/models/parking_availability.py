"""ParkingAvailability model."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from parkover.db.base import Base, JSONType


class ParkingAvailability(Base):
    """Live availability counters for one catalog parking spot."""

    __tablename__ = "parking_availability"

    spot_id = Column(String(64), primary_key=True)
    available_spots_two_wheeler = Column(Integer, nullable=False, default=0)
    available_spots_four_wheeler = Column(Integer, nullable=False, default=0)
    available_spots_heavy = Column(Integer, nullable=False, default=0)
    # {"<floor number>": remaining spots}
    floor_availability = Column(JSONType, nullable=False, default=dict)
    last_updated = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    # Bumped on every UPDATE; a stale version fails the write at flush.
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("available_spots_two_wheeler >= 0", name="check_two_wheeler_non_negative"),
        CheckConstraint("available_spots_four_wheeler >= 0", name="check_four_wheeler_non_negative"),
        CheckConstraint("available_spots_heavy >= 0", name="check_heavy_non_negative"),
    )

    def __repr__(self):
        return (
            f"<ParkingAvailability(spot_id={self.spot_id}, "
            f"two={self.available_spots_two_wheeler}, "
            f"four={self.available_spots_four_wheeler}, "
            f"heavy={self.available_spots_heavy})>"
        )
