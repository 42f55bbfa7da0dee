"""Helpers that turn storage calls into typed results."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parkover.db.transaction import run_transaction
from parkover.errors import ParkOverError, TransactionContention, classify_store_error
from parkover.results import Failure, Result, Success

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_ERRORS = (SQLAlchemyError, TransactionContention, OSError, asyncio.TimeoutError)


async def transact(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[T]],
    max_attempts: int = None,
) -> Result[T]:
    """Run ``work`` in one transaction and report the outcome as a result."""
    try:
        value = await run_transaction(session_factory, work, max_attempts=max_attempts)
    except ParkOverError as e:
        return Failure(e)
    except STORE_ERRORS as e:
        error = classify_store_error(e)
        logger.error(f"Transaction failed ({error.code}): {e}")
        return Failure(error)
    return Success(value)


async def read(
    session_factory: async_sessionmaker[AsyncSession],
    query: Callable[[AsyncSession], Awaitable[T]],
) -> Result[T]:
    """Run a read-only query in its own session."""
    try:
        async with session_factory() as session:
            value = await query(session)
    except ParkOverError as e:
        return Failure(e)
    except STORE_ERRORS as e:
        error = classify_store_error(e)
        logger.error(f"Query failed ({error.code}): {e}")
        return Failure(error)
    return Success(value)
