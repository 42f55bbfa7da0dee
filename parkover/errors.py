"""Typed failures surfaced by the booking and availability services."""

import asyncio

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm.exc import StaleDataError


class ParkOverError(Exception):
    """Base class for every failure the core hands back to its callers."""

    status_code = 500
    default_detail = "Unexpected parking core failure."
    default_code = "error"
    retryable = False

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        return self.default_code


class NotAuthenticated(ParkOverError):
    status_code = 401
    default_detail = "No user is signed in."
    default_code = "not_authenticated"


class NotFound(ParkOverError):
    status_code = 404
    default_detail = "Requested record was not found."
    default_code = "not_found"


class NoAvailability(ParkOverError):
    status_code = 404
    default_detail = "Availability record not found for parking spot."
    default_code = "no_availability"


class NoCapacity(ParkOverError):
    status_code = 409
    default_detail = "No spots available for this vehicle type."
    default_code = "no_capacity"


class InvalidTransition(ParkOverError):
    status_code = 409
    default_detail = "Booking cannot move to the requested status."
    default_code = "invalid_transition"


class PersistenceFailure(ParkOverError):
    status_code = 500
    default_detail = "Storage operation failed."
    default_code = "persistence_failure"


class TransientIO(ParkOverError):
    status_code = 503
    default_detail = "Backend temporarily unavailable, try again."
    default_code = "transient_io"
    retryable = True


class TransactionContention(Exception):
    """Raised by the transaction runner when every attempt lost a write race."""


def classify_store_error(exc: BaseException) -> ParkOverError:
    """Map a storage/network exception onto the failure taxonomy."""
    if isinstance(exc, ParkOverError):
        return exc
    if isinstance(
        exc,
        (
            TransactionContention,
            StaleDataError,
            OperationalError,
            PoolTimeoutError,
            asyncio.TimeoutError,
            ConnectionError,
            OSError,
        ),
    ):
        return TransientIO(f"{type(exc).__name__}: {exc}")
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return TransientIO(f"Connection lost: {exc}")
    if isinstance(exc, SQLAlchemyError):
        return PersistenceFailure(f"{type(exc).__name__}: {exc}")
    return PersistenceFailure(str(exc) or type(exc).__name__)
