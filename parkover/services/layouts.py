"""Floor layouts and deterministic spot identifiers.

There is no physical spot registry: spot numbers are generated from the floor
number and the cell index, two cells per row. The catalog layout is the
authoritative source of floors; the synthetic layout only stands in when the
catalog lists none for a spot.
"""

from typing import List, Optional, Protocol

from parkover.schemas.parking_spot import Floor, ParkingSpot
from parkover.utils import ordinal_suffix

SPOTS_PER_ROW = 2


def floor_prefix(floor_number: int) -> str:
    if floor_number > 0:
        return chr(ord("A") + floor_number - 1)
    if floor_number == 0:
        return "G"
    return f"B{-floor_number}-"


def spot_label(floor_number: int, index: int) -> str:
    """Spot label for the ``index``-th (0-based) cell on a floor, e.g. ``A01``."""
    return f"{floor_prefix(floor_number)}{index + 1:02d}"


def cell_position(index: int) -> tuple:
    """(row, column) of a cell; column 0 is left, 1 is right."""
    return index // SPOTS_PER_ROW, index % SPOTS_PER_ROW


class FloorLayout(Protocol):
    def floors_for(self, spot: Optional[ParkingSpot]) -> List[Floor]: ...


class CatalogFloorLayout:
    """Floors exactly as the catalog lists them."""

    def floors_for(self, spot: Optional[ParkingSpot]) -> List[Floor]:
        if spot is None:
            return []
        return sorted(spot.floors, key=lambda floor: floor.floor_number)


class SyntheticFloorLayout:
    """Generated floors for spots the catalog has no floor data for."""

    def __init__(self, floor_count: int = 3, rows: int = 6):
        self.floor_count = floor_count
        self.rows = rows

    def floors_for(self, spot: Optional[ParkingSpot]) -> List[Floor]:
        spots_per_floor = self.rows * SPOTS_PER_ROW
        return [
            Floor(
                floor_number=number,
                name=f"{number}{ordinal_suffix(number)} Floor",
                total_spots=spots_per_floor,
            )
            for number in range(1, self.floor_count + 1)
        ]


class FallbackFloorLayout:
    """Catalog floors when present, otherwise the synthetic generator."""

    def __init__(self, primary: FloorLayout = None, fallback: FloorLayout = None):
        self.primary = primary or CatalogFloorLayout()
        self.fallback = fallback or SyntheticFloorLayout()

    def floors_for(self, spot: Optional[ParkingSpot]) -> List[Floor]:
        floors = self.primary.floors_for(spot)
        if floors:
            return floors
        return self.fallback.floors_for(spot)
