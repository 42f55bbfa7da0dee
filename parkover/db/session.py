"""Async engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from parkover.config import settings


def create_engine(database_url: str = None, echo: bool = None) -> AsyncEngine:
    """Create the async engine for the configured database."""
    return create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO if echo is None else echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded attributes after commit so results can be returned."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


