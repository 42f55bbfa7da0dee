"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator, Callable, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from parkover.api.deps import get_services
from parkover.container import Services, build_services
from parkover.db.base import Base
from parkover.db.session import create_engine, create_session_factory
from parkover.identity import RequestIdentity, StaticIdentity
from parkover.main import app
from parkover.schemas.parking_spot import Floor, ParkingSpot
from parkover.services.availability import AvailabilityStore
from parkover.services.bookings import BookingManager
from parkover.services.catalog import Catalog

# Point at Postgres to exercise row locks; defaults to a throwaway SQLite file
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

TEST_USER_ID = "user-1"


@pytest.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema for each test."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'parkover.db'}"
    test_engine = create_engine(url, echo=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_spot() -> Callable[..., ParkingSpot]:
    """Build catalog spots; floors default to two floors of ten."""

    def factory(
        spot_id: str = "spot-1",
        two_wheeler: int = 10,
        four_wheeler: int = 20,
        heavy: int = 5,
        floors: List[Floor] = None,
        latitude: float = 12.9716,
        longitude: float = 77.5946,
        **overrides,
    ) -> ParkingSpot:
        if floors is None:
            floors = [
                Floor(floor_number=1, name="1st Floor", total_spots=10),
                Floor(floor_number=2, name="2nd Floor", total_spots=10, price_multiplier=0.9),
            ]
        return ParkingSpot(
            id=spot_id,
            name=f"Parking {spot_id}",
            address="MG Road",
            latitude=latitude,
            longitude=longitude,
            price_per_hour_two_wheeler=20.0,
            price_per_hour_four_wheeler=50.0,
            price_per_hour_heavy=100.0,
            total_spots_two_wheeler=two_wheeler,
            total_spots_four_wheeler=four_wheeler,
            total_spots_heavy=heavy,
            floors=floors,
            **overrides,
        )

    return factory


@pytest.fixture
def spot(make_spot) -> ParkingSpot:
    return make_spot()


@pytest.fixture
def catalog(spot) -> Catalog:
    return Catalog.from_spots([spot])


@pytest.fixture
async def availability_store(session_factory) -> AsyncGenerator[AvailabilityStore, None]:
    store = AvailabilityStore(session_factory)
    yield store
    await store.close()


@pytest.fixture
def identity() -> StaticIdentity:
    return StaticIdentity(TEST_USER_ID)


@pytest.fixture
def booking_manager(session_factory, availability_store, identity, catalog) -> BookingManager:
    return BookingManager(session_factory, availability_store, identity, catalog=catalog)


@pytest.fixture(scope="function")
async def services(engine, catalog) -> AsyncGenerator[Services, None]:
    """Services wired the way the application wires them, minus the network catalog."""
    test_services = build_services(engine=engine, identity=RequestIdentity(), catalog=catalog)
    await test_services.projector.load_catalog()
    test_services.projector.start()
    yield test_services
    await test_services.projector.close()
    await test_services.availability.close()


@pytest.fixture(scope="function")
async def async_client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    app.dependency_overrides[get_services] = lambda: services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
