"""Per-user vehicle registry and the preset vehicle list."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parkover.db.models import Vehicle
from parkover.enums import VehicleType
from parkover.errors import NotAuthenticated, NotFound
from parkover.identity import IdentityProvider
from parkover.results import Failure, Result
from parkover.schemas.parking_spot import PresetVehicle
from parkover.schemas.vehicle import VehicleCreate, VehicleResponse
from parkover.services.catalog import Catalog
from parkover.services.common import read, transact

logger = logging.getLogger(__name__)

DEFAULT_PRESETS = [
    PresetVehicle(id="preset_1", type=VehicleType.TWO_WHEELER, brand="Honda", model="Activa"),
    PresetVehicle(id="preset_2", type=VehicleType.TWO_WHEELER, brand="TVS", model="Jupiter"),
    PresetVehicle(id="preset_3", type=VehicleType.TWO_WHEELER, brand="Royal Enfield", model="Classic 350"),
    PresetVehicle(id="preset_4", type=VehicleType.FOUR_WHEELER, brand="Maruti Suzuki", model="Swift"),
    PresetVehicle(id="preset_5", type=VehicleType.FOUR_WHEELER, brand="Hyundai", model="i20"),
    PresetVehicle(id="preset_6", type=VehicleType.FOUR_WHEELER, brand="Tata", model="Nexon"),
    PresetVehicle(id="preset_7", type=VehicleType.FOUR_WHEELER, brand="Honda", model="City"),
    PresetVehicle(id="preset_8", type=VehicleType.FOUR_WHEELER, brand="Mahindra", model="XUV700"),
]


class VehicleRepository:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        identity: IdentityProvider,
        catalog: Optional[Catalog] = None,
    ):
        self._session_factory = session_factory
        self._identity = identity
        self._catalog = catalog

    async def list_for_user(self) -> Result[List[VehicleResponse]]:
        """Default vehicle first, then oldest first."""
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated())

        async def query(session: AsyncSession) -> List[VehicleResponse]:
            result = await session.execute(
                select(Vehicle)
                .where(Vehicle.user_id == user_id)
                .order_by(Vehicle.is_default.desc(), Vehicle.created_at.asc())
            )
            return [VehicleResponse.model_validate(vehicle) for vehicle in result.scalars().all()]

        return await read(self._session_factory, query)

    async def add(self, vehicle: VehicleCreate) -> Result[VehicleResponse]:
        """Register a vehicle. A user's first vehicle becomes their default."""
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated("Sign in to add a vehicle"))

        async def work(session: AsyncSession) -> VehicleResponse:
            existing = await session.execute(
                select(Vehicle.id).where(Vehicle.user_id == user_id).limit(1)
            )
            is_default = vehicle.is_default or existing.first() is None
            if is_default:
                await self._clear_default(session, user_id)

            values = vehicle.model_dump()
            values["type"] = vehicle.type.value
            values["is_default"] = is_default
            db_vehicle = Vehicle(user_id=user_id, **values)
            session.add(db_vehicle)
            await session.flush()
            await session.refresh(db_vehicle)
            return VehicleResponse.model_validate(db_vehicle)

        result = await transact(self._session_factory, work)
        if result.ok:
            logger.info(f"Vehicle {result.value.number} added for {user_id}")
        return result

    async def set_default(self, vehicle_id: UUID) -> Result[VehicleResponse]:
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated())

        async def work(session: AsyncSession) -> VehicleResponse:
            db_vehicle = await self._get_owned(session, vehicle_id, user_id)
            await self._clear_default(session, user_id)
            db_vehicle.is_default = True
            await session.flush()
            return VehicleResponse.model_validate(db_vehicle)

        return await transact(self._session_factory, work)

    async def delete(self, vehicle_id: UUID) -> Result[None]:
        user_id = self._identity.current_user_id()
        if not user_id:
            return Failure(NotAuthenticated())

        async def work(session: AsyncSession) -> None:
            db_vehicle = await self._get_owned(session, vehicle_id, user_id)
            await session.delete(db_vehicle)

        result = await transact(self._session_factory, work)
        if result.ok:
            logger.info(f"Vehicle {vehicle_id} deleted for {user_id}")
        return result

    async def presets(self) -> List[PresetVehicle]:
        """Preset vehicles from the catalog, or the built-in list if it is unavailable."""
        if self._catalog is not None:
            result = await self._catalog.vehicle_catalog()
            if result.ok and result.value.preset_vehicles:
                return result.value.preset_vehicles
        return list(DEFAULT_PRESETS)

    @staticmethod
    async def _get_owned(session: AsyncSession, vehicle_id: UUID, user_id: str) -> Vehicle:
        db_vehicle = await session.get(Vehicle, vehicle_id)
        if db_vehicle is None or db_vehicle.user_id != user_id:
            raise NotFound(f"Vehicle {vehicle_id} not found")
        return db_vehicle

    @staticmethod
    async def _clear_default(session: AsyncSession, user_id: str) -> None:
        await session.execute(
            update(Vehicle)
            .where(Vehicle.user_id == user_id, Vehicle.is_default.is_(True))
            .values(is_default=False)
        )
