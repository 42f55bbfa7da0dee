"""Transaction runner with commit-time conflict detection.

``run_transaction`` opens a fresh session, begins a transaction and awaits the
unit of work. Rows read through :func:`lock_for_update` are row-locked on
Postgres, and every versioned row is written with a compare-and-swap on its
``version`` column, so a writer that read a stale row fails at flush instead of
silently overwriting a concurrent commit. Like a document store's transaction
runner, the whole unit of work is re-run from a fresh read when it loses such a
race; domain errors raised by the unit of work abort immediately.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from parkover.config import settings
from parkover.errors import TransactionContention

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M")

# Lost a version compare-and-swap, or the database reported lock contention.
CONFLICT_ERRORS = (StaleDataError, OperationalError)


async def lock_for_update(session: AsyncSession, model: Type[M], key) -> Optional[M]:
    """Read a row inside the current transaction, locking it where supported."""
    mapper_pk = model.__mapper__.primary_key[0]
    result = await session.execute(
        select(model)
        .where(mapper_pk == key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def run_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[T]],
    max_attempts: int = None,
    retry_delay: float = None,
) -> T:
    """Run ``work`` atomically, re-running it on write conflicts.

    Raises:
        TransactionContention: every attempt lost a write race.
        Exception: anything raised by ``work`` or the database, after rollback.
    """
    max_attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS
    if retry_delay is None:
        retry_delay = settings.TRANSACTION_RETRY_DELAY_SECONDS

    attempt = 0
    while True:
        attempt += 1
        try:
            async with session_factory() as session:
                async with session.begin():
                    return await work(session)
        except CONFLICT_ERRORS as e:
            if attempt >= max_attempts:
                logger.warning(f"Transaction gave up after {attempt} conflicting attempts: {e}")
                raise TransactionContention(str(e)) from e
            logger.debug(f"Transaction conflict on attempt {attempt}, re-running: {e}")
            await asyncio.sleep(retry_delay * attempt)
