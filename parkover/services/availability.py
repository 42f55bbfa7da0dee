"""Availability store: transactional per-spot counters and live subscriptions."""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parkover.db.models import ParkingAvailability
from parkover.db.transaction import lock_for_update
from parkover.enums import VehicleType
from parkover.errors import NoAvailability, NoCapacity, TransientIO
from parkover.results import Result
from parkover.schemas.availability import (
    COUNTER_FIELDS,
    AvailabilityResponse,
    AvailabilityUpdate,
    Capacities,
)
from parkover.schemas.parking_spot import ParkingSpot
from parkover.services.common import read, transact
from parkover.streams import Subscription
from parkover.utils import utcnow

logger = logging.getLogger(__name__)


def full_capacity(spot: ParkingSpot) -> AvailabilityUpdate:
    """Counters for a spot with nothing booked."""
    return AvailabilityUpdate(
        available_spots_two_wheeler=spot.total_spots_two_wheeler,
        available_spots_four_wheeler=spot.total_spots_four_wheeler,
        available_spots_heavy=spot.total_spots_heavy,
        floor_availability={str(floor.floor_number): floor.total_spots for floor in spot.floors},
        last_updated=utcnow(),
    )


def decrement(
    record: ParkingAvailability,
    vehicle_type: VehicleType,
    floor_number: Optional[int] = None,
) -> AvailabilityUpdate:
    """Take one spot of ``vehicle_type``; the floor counter is best-effort."""
    current = getattr(record, COUNTER_FIELDS[vehicle_type])
    if current <= 0:
        raise NoCapacity(
            f"No spots available for {vehicle_type.value.lower().replace('_', ' ')} "
            f"at {record.spot_id}"
        )
    extra = {"last_updated": utcnow()}
    if floor_number is not None:
        floor_key = str(floor_number)
        floors = dict(record.floor_availability or {})
        if floors.get(floor_key, 0) > 0:
            floors[floor_key] -= 1
            extra["floor_availability"] = floors
    return AvailabilityUpdate.for_counter(vehicle_type, current - 1, **extra)


def increment(
    record: ParkingAvailability,
    vehicle_type: VehicleType,
    capacities: Capacities,
    floor_number: Optional[int] = None,
) -> AvailabilityUpdate:
    """Release one spot, never exceeding the supplied capacity."""
    current = getattr(record, COUNTER_FIELDS[vehicle_type])
    extra = {"last_updated": utcnow()}
    if floor_number is not None:
        floor_key = str(floor_number)
        floors = dict(record.floor_availability or {})
        floor_total = capacities.floors.get(floor_key)
        if floor_key in floors and floor_total is not None:
            floors[floor_key] = min(floors[floor_key] + 1, floor_total)
            extra["floor_availability"] = floors
    return AvailabilityUpdate.for_counter(
        vehicle_type, min(current + 1, capacities.for_type(vehicle_type)), **extra
    )


def apply_update(record: ParkingAvailability, update: AvailabilityUpdate) -> None:
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(record, field, value)


class _Listener:
    """One subscription's pump: re-reads and pushes whenever marked dirty."""

    def __init__(self, spot_id: Optional[str]):
        self.spot_id = spot_id
        self.dirty = asyncio.Event()
        self.subscription: Optional[Subscription] = None
        self.task: Optional[asyncio.Task] = None

    def matches(self, spot_ids: Set[str]) -> bool:
        return self.spot_id is None or self.spot_id in spot_ids


class AvailabilityStore:
    """Sole writer of ``parking_availability`` records.

    Every mutation runs in a single database transaction and returns a
    :class:`~parkover.results.Result` instead of raising. Subscriptions are fed
    from commits made through this store (and through
    :meth:`reserve_in` or :meth:`release_in` plus :meth:`notify_changed` for
    callers that share the transaction).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: int = None,
    ):
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._listeners: Set[_Listener] = set()
        self._pumps: Set[asyncio.Task] = set()

    # Initialization

    async def initialize(self, spot: ParkingSpot) -> Result[AvailabilityResponse]:
        """Write a full-capacity record, overwriting any existing one."""

        async def work(session: AsyncSession) -> AvailabilityResponse:
            record = await self._write_full_capacity(session, spot)
            await session.flush()
            return AvailabilityResponse.model_validate(record)

        result = await transact(self._session_factory, work, self._max_attempts)
        if result.ok:
            self.notify_changed([spot.id])
        return result

    async def initialize_all(self, spots: List[ParkingSpot]) -> Result[int]:
        """Write full-capacity records for ``spots`` in one batch."""

        async def work(session: AsyncSession) -> int:
            for spot in spots:
                await self._write_full_capacity(session, spot)
            return len(spots)

        result = await transact(self._session_factory, work, self._max_attempts)
        if result.ok and spots:
            logger.info(f"Initialized availability for {len(spots)} parking spots")
            self.notify_changed(spot.id for spot in spots)
        return result

    async def check_and_initialize(self, spots: List[ParkingSpot]) -> List[str]:
        """Backfill records for catalog spots that have none. Returns initialized ids."""
        existing = await self.existing_ids()
        if not existing.ok:
            logger.warning(f"Skipping availability backfill: {existing.error.detail}")
            return []

        missing = [spot for spot in spots if spot.id not in existing.value]
        if not missing:
            return []

        result = await self.initialize_all(missing)
        if not result.ok:
            logger.warning(f"Availability backfill failed: {result.error.detail}")
            return []
        return [spot.id for spot in missing]

    async def _write_full_capacity(
        self, session: AsyncSession, spot: ParkingSpot
    ) -> ParkingAvailability:
        record = await lock_for_update(session, ParkingAvailability, spot.id)
        if record is None:
            record = ParkingAvailability(spot_id=spot.id)
            session.add(record)
        apply_update(record, full_capacity(spot))
        return record

    # Reads

    async def get(self, spot_id: str) -> Result[Optional[AvailabilityResponse]]:
        return await read(self._session_factory, lambda session: self._load_one(session, spot_id))

    async def get_all(self) -> Result[Dict[str, AvailabilityResponse]]:
        return await read(self._session_factory, self._load_all)

    async def existing_ids(self) -> Result[Set[str]]:
        async def query(session: AsyncSession) -> Set[str]:
            result = await session.execute(select(ParkingAvailability.spot_id))
            return set(result.scalars().all())

        return await read(self._session_factory, query)

    @staticmethod
    async def _load_one(session: AsyncSession, spot_id: str) -> Optional[AvailabilityResponse]:
        record = await session.get(ParkingAvailability, spot_id)
        if record is None:
            return None
        return AvailabilityResponse.model_validate(record)

    @staticmethod
    async def _load_all(session: AsyncSession) -> Dict[str, AvailabilityResponse]:
        result = await session.execute(select(ParkingAvailability))
        return {
            record.spot_id: AvailabilityResponse.model_validate(record)
            for record in result.scalars().all()
        }

    # Transactional counters

    async def decrease(
        self,
        spot_id: str,
        vehicle_type: VehicleType,
        floor_number: Optional[int] = None,
    ) -> Result[AvailabilityResponse]:
        """Take one spot for ``vehicle_type`` (and the floor, when it has room)."""

        async def work(session: AsyncSession) -> AvailabilityResponse:
            record = await self._require(session, spot_id)
            apply_update(record, decrement(record, vehicle_type, floor_number))
            await session.flush()
            return AvailabilityResponse.model_validate(record)

        result = await transact(self._session_factory, work, self._max_attempts)
        if result.ok:
            self.notify_changed([spot_id])
        else:
            logger.info(f"Decrease on {spot_id} failed: {result.error.code}")
        return result

    async def increase(
        self,
        spot_id: str,
        vehicle_type: VehicleType,
        capacities: Capacities,
        floor_number: Optional[int] = None,
    ) -> Result[AvailabilityResponse]:
        """Release one spot, clamped to ``capacities`` so double releases cannot inflate."""

        async def work(session: AsyncSession) -> AvailabilityResponse:
            record = await self._require(session, spot_id)
            apply_update(record, increment(record, vehicle_type, capacities, floor_number))
            await session.flush()
            return AvailabilityResponse.model_validate(record)

        result = await transact(self._session_factory, work, self._max_attempts)
        if result.ok:
            self.notify_changed([spot_id])
        return result

    async def reserve_in(
        self,
        session: AsyncSession,
        spot_id: str,
        vehicle_type: VehicleType,
        floor_number: Optional[int] = None,
    ) -> bool:
        """Decrement inside a caller-owned transaction.

        Returns False when the spot has no availability record (nothing to
        decrement). Raises :class:`NoCapacity` when the counter is exhausted,
        which aborts the caller's transaction.
        """
        record = await lock_for_update(session, ParkingAvailability, spot_id)
        if record is None:
            return False
        apply_update(record, decrement(record, vehicle_type, floor_number))
        return True

    async def release_in(
        self,
        session: AsyncSession,
        spot_id: str,
        vehicle_type: VehicleType,
        capacities: Optional[Capacities],
        floor_number: Optional[int] = None,
    ) -> bool:
        """Increment inside a caller-owned transaction; the counterpart of :meth:`reserve_in`.

        Returns False when the spot has no availability record. Raises
        :class:`TransientIO` when the capacities needed to clamp the release
        are unknown, which aborts the caller's transaction.
        """
        record = await lock_for_update(session, ParkingAvailability, spot_id)
        if record is None:
            return False
        if capacities is None:
            raise TransientIO(f"Capacities for {spot_id} are unknown until the catalog loads")
        apply_update(record, increment(record, vehicle_type, capacities, floor_number))
        return True

    @staticmethod
    async def _require(session: AsyncSession, spot_id: str) -> ParkingAvailability:
        record = await lock_for_update(session, ParkingAvailability, spot_id)
        if record is None:
            raise NoAvailability(f"Availability not found for spot {spot_id}")
        return record

    # Subscriptions

    def subscribe_one(self, spot_id: str) -> Subscription[Optional[AvailabilityResponse]]:
        """Stream a spot's record: now, then after every change; ``None`` if unknown."""
        return self._listen(spot_id)

    def subscribe_all(self) -> Subscription[Dict[str, AvailabilityResponse]]:
        """Stream every record keyed by spot id; ``{}`` when the read fails."""
        return self._listen(None)

    def notify_changed(self, spot_ids: Iterable[str]) -> None:
        """Mark subscriptions watching ``spot_ids`` for a fresh read."""
        changed = set(spot_ids)
        for listener in list(self._listeners):
            if listener.matches(changed):
                listener.dirty.set()

    async def close(self) -> None:
        """Cancel every open subscription and wait for its reads to finish."""
        for listener in list(self._listeners):
            listener.subscription.cancel()
        pumps = list(self._pumps)
        if pumps:
            await asyncio.gather(*pumps, return_exceptions=True)

    @property
    def pump_count(self) -> int:
        """Pump tasks that have not finished yet, including cancelled ones still unwinding."""
        return len(self._pumps)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _listen(self, spot_id: Optional[str]) -> Subscription:
        listener = _Listener(spot_id)
        listener.subscription = Subscription(on_cancel=lambda: self._detach(listener))
        self._listeners.add(listener)
        listener.task = asyncio.get_running_loop().create_task(self._pump(listener))
        self._pumps.add(listener.task)
        listener.task.add_done_callback(self._pumps.discard)
        listener.dirty.set()
        return listener.subscription

    def _detach(self, listener: _Listener) -> None:
        self._listeners.discard(listener)
        if listener.task is not None:
            listener.task.cancel()

    async def _pump(self, listener: _Listener) -> None:
        while True:
            await listener.dirty.wait()
            listener.dirty.clear()
            snapshot = await self._snapshot(listener.spot_id)
            listener.subscription.push(snapshot)

    async def _snapshot(self, spot_id: Optional[str]):
        try:
            async with self._session_factory() as session:
                if spot_id is None:
                    return await self._load_all(session)
                return await self._load_one(session, spot_id)
        except Exception as e:
            # Malformed rows surface as validation errors, not SQLAlchemyError
            logger.warning(f"Availability read for {spot_id or 'all spots'} failed: {e}")
            return {} if spot_id is None else None
