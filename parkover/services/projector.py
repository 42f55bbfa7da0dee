"""Merged view of the static catalog and the live availability counters."""

import asyncio
import logging
from typing import Dict, List, Optional

from geopy.distance import great_circle

from parkover.config import settings
from parkover.results import Result, Success
from parkover.schemas.availability import AvailabilityResponse
from parkover.schemas.parking_spot import ParkingSpot
from parkover.services.availability import AvailabilityStore
from parkover.services.catalog import Catalog
from parkover.streams import Broadcaster, Subscription

logger = logging.getLogger(__name__)


def _clamp(value: int, total: int) -> int:
    return max(0, min(value, total))


def merge_availability(
    spots: List[ParkingSpot],
    availability: Dict[str, AvailabilityResponse],
) -> List[ParkingSpot]:
    """Overlay live counters onto catalog spots.

    Spots without a record, and floors missing from a record, show full
    capacity.
    """
    merged = []
    for spot in spots:
        record = availability.get(spot.id)
        floor_counts = record.floor_availability if record is not None else {}
        floors = [
            floor.model_copy(
                update={
                    "available_spots": _clamp(
                        floor_counts.get(str(floor.floor_number), floor.total_spots),
                        floor.total_spots,
                    )
                }
            )
            for floor in spot.floors
        ]
        if record is None:
            counters = {
                "available_spots_two_wheeler": spot.total_spots_two_wheeler,
                "available_spots_four_wheeler": spot.total_spots_four_wheeler,
                "available_spots_heavy": spot.total_spots_heavy,
            }
        else:
            counters = {
                "available_spots_two_wheeler": _clamp(
                    record.available_spots_two_wheeler, spot.total_spots_two_wheeler
                ),
                "available_spots_four_wheeler": _clamp(
                    record.available_spots_four_wheeler, spot.total_spots_four_wheeler
                ),
                "available_spots_heavy": _clamp(
                    record.available_spots_heavy, spot.total_spots_heavy
                ),
            }
        merged.append(spot.model_copy(update={**counters, "floors": floors}))
    return merged


class AvailabilityProjector:
    """Keeps the latest merged snapshot and fans it out to subscribers."""

    def __init__(self, catalog: Catalog, availability: AvailabilityStore):
        self._catalog = catalog
        self._availability = availability
        self._counters: Dict[str, AvailabilityResponse] = {}
        self._latest: Optional[List[ParkingSpot]] = None
        self._broadcaster: Broadcaster[List[ParkingSpot]] = Broadcaster()
        self._feed: Optional[Subscription] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def latest(self) -> Optional[List[ParkingSpot]]:
        return self._latest

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def load_catalog(self, refresh: bool = False) -> Result[List[ParkingSpot]]:
        """Fetch the catalog, backfill missing counters and recompute."""
        result = await self._catalog.load(refresh=refresh)
        if not result.ok:
            logger.error(f"Catalog load failed: {result.error.detail}")
            return result

        initialized = await self._availability.check_and_initialize(result.value)
        if initialized:
            logger.info(f"Backfilled availability for {len(initialized)} spots")

        if not self.running:
            counters = await self._availability.get_all()
            if counters.ok:
                self._counters = counters.value
        self._recompute()
        return Success(self._latest or [])

    def start(self) -> None:
        """Follow the availability store; every emission republishes the merge."""
        if self.running:
            return
        self._feed = self._availability.subscribe_all()
        self._task = asyncio.get_running_loop().create_task(self._consume(self._feed))

    async def stop(self) -> None:
        if self._feed is not None:
            self._feed.cancel()
            self._feed = None
        if self._task is not None:
            await self._task
            self._task = None

    async def close(self) -> None:
        await self.stop()
        self._broadcaster.close()

    def subscribe(self) -> Subscription[List[ParkingSpot]]:
        """Merged snapshots; the current one first, if there is one."""
        return self._broadcaster.subscribe(initial=self._latest)

    def get_spot(self, spot_id: str) -> Optional[ParkingSpot]:
        for spot in self._latest or []:
            if spot.id == spot_id:
                return spot
        return None

    def spots_near(
        self,
        latitude: float,
        longitude: float,
        radius_km: float = None,
    ) -> List[ParkingSpot]:
        """Spots within ``radius_km`` of the point, nearest first."""
        if radius_km is None:
            radius_km = settings.SEARCH_RADIUS_KM
        origin = (latitude, longitude)
        nearby = []
        for spot in self._latest or []:
            distance = great_circle(origin, (spot.latitude, spot.longitude)).km
            if distance <= radius_km:
                nearby.append((distance, spot))
        nearby.sort(key=lambda pair: pair[0])
        return [spot for _, spot in nearby]

    async def _consume(self, feed: Subscription) -> None:
        async for counters in feed:
            self._counters = counters
            self._recompute()

    def _recompute(self) -> None:
        spots = self._catalog.spots
        if not spots:
            return
        self._latest = merge_availability(spots, self._counters)
        self._broadcaster.publish(self._latest)
