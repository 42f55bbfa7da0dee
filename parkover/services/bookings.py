"""Booking lifecycle: conflict checks, creation with availability decrement,
status transitions and the floor occupancy grid."""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parkover.config import settings
from parkover.db.models import Booking
from parkover.db.transaction import lock_for_update
from parkover.enums import (
    HISTORY_STATUSES,
    ONGOING_STATUSES,
    RELEASING_STATUSES,
    RESERVING_STATUSES,
    BookingStatus,
    VehicleType,
)
from parkover.errors import InvalidTransition, NotAuthenticated, NotFound
from parkover.identity import IdentityProvider
from parkover.results import Failure, Result, Success
from parkover.schemas.availability import Capacities
from parkover.schemas.booking import BookingCreate, BookingResponse
from parkover.schemas.floor import FloorGrid, SpotCell
from parkover.schemas.parking_spot import Floor
from parkover.services.availability import AvailabilityStore
from parkover.services.catalog import Catalog
from parkover.services.common import read, transact
from parkover.services.layouts import FallbackFloorLayout, FloorLayout, cell_position, spot_label
from parkover.utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.EXPIRED},
    BookingStatus.CONFIRMED: {BookingStatus.ACTIVE, BookingStatus.CANCELLED},
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED},
}


def windows_overlap(
    check_in: datetime, check_out: datetime, entry_time: datetime, exit_time: datetime
) -> bool:
    """Half-open windows: back-to-back bookings do not overlap."""
    return ensure_utc(check_in) < ensure_utc(exit_time) and ensure_utc(check_out) > ensure_utc(
        entry_time
    )


def _status_values(statuses) -> List[str]:
    return [status.value for status in statuses]


class BookingManager:
    """Owns booking records and couples their creation to availability."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        availability: AvailabilityStore,
        identity: IdentityProvider,
        catalog: Optional[Catalog] = None,
        floor_layout: Optional[FloorLayout] = None,
        fail_open: bool = None,
        max_attempts: int = None,
    ):
        self._session_factory = session_factory
        self._availability = availability
        self._identity = identity
        self._catalog = catalog
        self._floor_layout = floor_layout or FallbackFloorLayout()
        self._fail_open = settings.AVAILABILITY_CHECK_FAIL_OPEN if fail_open is None else fail_open
        self._max_attempts = max_attempts

    async def is_spot_available(
        self,
        parking_id: str,
        spot_number: str,
        check_in: datetime,
        check_out: datetime,
    ) -> bool:
        """True when no reserving booking on the spot overlaps ``[check_in, check_out)``."""

        async def query(session: AsyncSession) -> List[Booking]:
            result = await session.execute(
                select(Booking).where(
                    Booking.parking_id == parking_id,
                    Booking.spot_number == spot_number,
                    Booking.booking_status.in_(_status_values(RESERVING_STATUSES)),
                )
            )
            return list(result.scalars().all())

        result = await read(self._session_factory, query)
        if not result.ok:
            logger.warning(
                f"Conflict check for {parking_id}/{spot_number} failed, "
                f"reporting {'available' if self._fail_open else 'unavailable'}: "
                f"{result.error.detail}"
            )
            return self._fail_open

        return not any(
            windows_overlap(check_in, check_out, booking.entry_time, booking.exit_time)
            for booking in result.value
        )

    async def create_booking(self, draft: BookingCreate) -> Result[BookingResponse]:
        """Insert a CONFIRMED booking and take one unit of availability, atomically."""
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated("Sign in to create a booking"))

        now = utcnow()
        booking_id = f"{settings.BOOKING_ID_PREFIX}{uuid4().hex[:8].upper()}"
        values = draft.model_dump()
        for field in ("vehicle_type", "payment_method", "payment_status"):
            values[field] = values[field].value

        async def work(session: AsyncSession):
            reserved = await self._availability.reserve_in(
                session, draft.parking_id, draft.vehicle_type, draft.floor_number
            )
            booking = Booking(
                id=booking_id,
                user_id=user_id,
                booking_status=BookingStatus.CONFIRMED.value,
                qr_code_data=f"{settings.QR_CODE_PREFIX}-{booking_id}-{int(now.timestamp() * 1000)}",
                created_at=now,
                updated_at=now,
                **values,
            )
            session.add(booking)
            await session.flush()
            return BookingResponse.model_validate(booking), reserved

        result = await transact(self._session_factory, work, self._max_attempts)
        if not result.ok:
            logger.info(f"Booking for {draft.parking_id} not created: {result.error.code}")
            return result

        booking, reserved = result.value
        if reserved:
            self._availability.notify_changed([draft.parking_id])
        else:
            logger.warning(
                f"No availability record for {draft.parking_id}; "
                f"booking {booking.id} created without a decrement"
            )
        logger.info(f"Booking {booking.id} created for spot {draft.parking_id} by {user_id}")
        return Success(booking)

    async def get_booking(self, booking_id: str) -> Result[BookingResponse]:
        async def query(session: AsyncSession) -> BookingResponse:
            booking = await session.get(Booking, booking_id)
            if booking is None:
                raise NotFound(f"Booking {booking_id} not found")
            return BookingResponse.model_validate(booking)

        return await read(self._session_factory, query)

    async def list_ongoing(self) -> Result[List[BookingResponse]]:
        """Current user's pending, confirmed and active bookings, soonest first."""
        return await self._list_for_user(ONGOING_STATUSES, Booking.entry_time.asc())

    async def list_history(self) -> Result[List[BookingResponse]]:
        """Current user's completed and cancelled bookings, newest first."""
        return await self._list_for_user(HISTORY_STATUSES, Booking.created_at.desc())

    async def _list_for_user(self, statuses, order_by) -> Result[List[BookingResponse]]:
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated())

        async def query(session: AsyncSession) -> List[BookingResponse]:
            result = await session.execute(
                select(Booking)
                .where(
                    Booking.user_id == user_id,
                    Booking.booking_status.in_(_status_values(statuses)),
                )
                .order_by(order_by)
            )
            return [BookingResponse.model_validate(booking) for booking in result.scalars().all()]

        return await read(self._session_factory, query)

    async def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        at: Optional[datetime] = None,
    ) -> Result[BookingResponse]:
        """Move a booking along its lifecycle.

        Completing or cancelling a booking that held a spot gives the spot
        back in the same transaction, so the status change and the release
        commit together or not at all. Of several concurrent changes to one
        booking, only the first commits; the rest re-read and fail with
        :class:`InvalidTransition`.
        """
        at = ensure_utc(at) or utcnow()

        async def work(session: AsyncSession):
            booking = await lock_for_update(session, Booking, booking_id)
            if booking is None:
                raise NotFound(f"Booking {booking_id} not found")
            current = BookingStatus(booking.booking_status)
            if status not in TRANSITIONS.get(current, ()):
                raise InvalidTransition(
                    f"Booking {booking_id} cannot move from {current.value} to {status.value}"
                )
            released = False
            if current in RESERVING_STATUSES and status in RELEASING_STATUSES:
                released = await self._availability.release_in(
                    session,
                    booking.parking_id,
                    VehicleType(booking.vehicle_type),
                    self._capacities(booking.parking_id),
                    booking.floor_number,
                )
            booking.booking_status = status.value
            booking.updated_at = at
            if status == BookingStatus.COMPLETED:
                booking.actual_exit_time = at
            await session.flush()
            return BookingResponse.model_validate(booking), released

        result = await transact(self._session_factory, work, self._max_attempts)
        if not result.ok:
            logger.info(f"Booking {booking_id} not moved to {status.value}: {result.error.code}")
            return result

        booking, released = result.value
        if released:
            self._availability.notify_changed([booking.parking_id])
        logger.info(f"Booking {booking_id} moved to {status.value}")
        return Success(booking)

    def _capacities(self, parking_id: str) -> Optional[Capacities]:
        if self._catalog is None:
            return None
        return self._catalog.capacities(parking_id)

    async def get_floors_with_spots(
        self, parking_id: str, vehicle_type: VehicleType
    ) -> Result[List[FloorGrid]]:
        """Floor grids with cells occupied by live bookings and by the counters."""
        spot = self._catalog.get(parking_id) if self._catalog is not None else None
        floors = self._floor_layout.floors_for(spot)
        now = utcnow()

        async def query(session: AsyncSession) -> List[Booking]:
            result = await session.execute(
                select(Booking).where(
                    Booking.parking_id == parking_id,
                    Booking.booking_status.in_(_status_values(RESERVING_STATUSES)),
                )
            )
            return [
                booking
                for booking in result.scalars().all()
                if ensure_utc(booking.exit_time) > now
            ]

        bookings = await read(self._session_factory, query)
        if not bookings.ok:
            return bookings
        availability = await self._availability.get(parking_id)
        if not availability.ok:
            return availability

        floor_counts = availability.value.floor_availability if availability.value else {}
        return Success(
            [
                self._build_grid(floor, vehicle_type, bookings.value, floor_counts)
                for floor in floors
            ]
        )

    @staticmethod
    def _build_grid(
        floor: Floor,
        vehicle_type: VehicleType,
        bookings: List[Booking],
        floor_counts: Dict[str, int],
    ) -> FloorGrid:
        booked_until: Dict[str, datetime] = {}
        for booking in bookings:
            if booking.floor_number != floor.floor_number:
                continue
            exit_time = ensure_utc(booking.exit_time)
            previous = booked_until.get(booking.spot_number)
            if previous is None or exit_time > previous:
                booked_until[booking.spot_number] = exit_time

        cells = []
        for index in range(floor.total_spots):
            number = spot_label(floor.floor_number, index)
            row, column = cell_position(index)
            until = booked_until.get(number)
            cells.append(
                SpotCell(
                    id=f"{floor.floor_number}_{number}",
                    spot_number=number,
                    floor_number=floor.floor_number,
                    row=row,
                    column=column,
                    vehicle_type=vehicle_type,
                    is_available=until is None,
                    is_booked=until is not None,
                    booked_until=until,
                )
            )

        # Counters may know about occupancy the booking rows don't show
        available = floor_counts.get(str(floor.floor_number), floor.total_spots)
        available = max(0, min(available, floor.total_spots))
        booked = sum(1 for cell in cells if cell.is_booked)
        shortfall = (floor.total_spots - available) - booked
        for cell in cells:
            if shortfall <= 0:
                break
            if cell.is_available:
                cell.is_available = False
                shortfall -= 1

        return FloorGrid(
            floor_number=floor.floor_number,
            name=floor.name,
            total_spots=floor.total_spots,
            available_spots=sum(1 for cell in cells if cell.is_available),
            spots=cells,
        )
