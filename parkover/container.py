"""Wiring of the core services around one database engine."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from parkover.db.session import create_engine, create_session_factory
from parkover.identity import IdentityProvider, RequestIdentity
from parkover.services.availability import AvailabilityStore
from parkover.services.bookings import BookingManager
from parkover.services.catalog import Catalog, CatalogClient
from parkover.services.projector import AvailabilityProjector
from parkover.services.vehicles import VehicleRepository


@dataclass
class Services:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    identity: IdentityProvider
    catalog: Catalog
    availability: AvailabilityStore
    bookings: BookingManager
    projector: AvailabilityProjector
    vehicles: VehicleRepository

    async def aclose(self) -> None:
        await self.projector.close()
        await self.availability.close()
        await self.catalog.aclose()
        await self.engine.dispose()


def build_services(
    database_url: str = None,
    identity: IdentityProvider = None,
    catalog: Catalog = None,
    engine: AsyncEngine = None,
    fail_open: bool = None,
) -> Services:
    """Construct every service once; callers own the returned instances."""
    engine = engine or create_engine(database_url)
    session_factory = create_session_factory(engine)
    identity = identity or RequestIdentity()
    catalog = catalog or Catalog(CatalogClient())

    availability = AvailabilityStore(session_factory)
    bookings = BookingManager(
        session_factory,
        availability,
        identity,
        catalog=catalog,
        fail_open=fail_open,
    )
    return Services(
        engine=engine,
        session_factory=session_factory,
        identity=identity,
        catalog=catalog,
        availability=availability,
        bookings=bookings,
        projector=AvailabilityProjector(catalog, availability),
        vehicles=VehicleRepository(session_factory, identity, catalog=catalog),
    )
