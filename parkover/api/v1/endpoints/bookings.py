"""Booking endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from parkover.api.deps import bind_user, get_services, unwrap
from parkover.container import Services
from parkover.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    SpotAvailabilityCheck,
)

router = APIRouter()


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Confirm a booking and take one spot from the parking's availability."""
    return unwrap(await services.bookings.create_booking(booking_data))


@router.get("/check", response_model=SpotAvailabilityCheck)
async def check_spot(
    parking_id: str,
    spot_number: str,
    check_in: datetime,
    check_out: datetime,
    services: Services = Depends(get_services),
):
    """Check whether a spot is free for a time window."""
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="check_out must be after check_in",
        )
    available = await services.bookings.is_spot_available(
        parking_id, spot_number, check_in, check_out
    )
    return SpotAvailabilityCheck(
        parking_id=parking_id,
        spot_number=spot_number,
        check_in=check_in,
        check_out=check_out,
        available=available,
    )


@router.get("/ongoing", response_model=List[BookingResponse])
async def list_ongoing_bookings(
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """List the caller's pending, confirmed and active bookings."""
    return unwrap(await services.bookings.list_ongoing())


@router.get("/history", response_model=List[BookingResponse])
async def list_booking_history(
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """List the caller's completed and cancelled bookings."""
    return unwrap(await services.bookings.list_history())


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Get a booking by ID."""
    booking = unwrap(await services.bookings.get_booking(booking_id))
    _check_owner(booking, user_id)
    return booking


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    status_data: BookingStatusUpdate,
    user_id: Optional[str] = Depends(bind_user),
    services: Services = Depends(get_services),
):
    """Move a booking to a new status.

    Completing or cancelling a booking that held a spot gives the spot back
    to the parking's availability in the same transaction.
    """
    current = unwrap(await services.bookings.get_booking(booking_id))
    _check_owner(current, user_id)
    return unwrap(
        await services.bookings.update_status(booking_id, status_data.status, status_data.at)
    )


def _check_owner(booking: BookingResponse, user_id: Optional[str]) -> None:
    # Gate systems act without a user; signed-in users only see their own bookings.
    if user_id and booking.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking.id} not found",
        )

