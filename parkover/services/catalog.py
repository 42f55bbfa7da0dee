"""Static catalog of parking spots and vehicles, fetched over HTTP and cached."""

import logging
from typing import Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from parkover.config import settings
from parkover.errors import PersistenceFailure, TransientIO
from parkover.results import Failure, Result, Success
from parkover.schemas.availability import Capacities
from parkover.schemas.parking_spot import (
    Amenity,
    ParkingSpot,
    ParkingSpotsCatalog,
    VehicleCatalog,
)

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


class CatalogClient:
    """Reads the catalog JSON documents."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.CATALOG_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def fetch_parking_spots(self) -> Result[ParkingSpotsCatalog]:
        return await self._get_document(settings.CATALOG_PARKING_SPOTS_PATH, ParkingSpotsCatalog)

    async def fetch_vehicle_catalog(self) -> Result[VehicleCatalog]:
        return await self._get_document(settings.CATALOG_VEHICLES_PATH, VehicleCatalog)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_document(self, path: str, model: Type[P]) -> Result[P]:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Catalog request {path} returned {status}")
            return Failure(TransientIO(f"Catalog request failed with status {status}"))
        except httpx.HTTPError as e:
            logger.error(f"Catalog request {path} failed: {e}")
            return Failure(TransientIO(f"Catalog unreachable: {e}"))

        try:
            return Success(model.model_validate(response.json()))
        except (ValueError, ValidationError) as e:
            logger.error(f"Catalog document {path} is malformed: {e}")
            return Failure(PersistenceFailure(f"Malformed catalog document {path}"))


class Catalog:
    """In-memory copy of the catalog. Loaded once, reloaded on request."""

    def __init__(self, client: Optional[CatalogClient] = None):
        self._client = client
        self._spots: Dict[str, ParkingSpot] = {}
        self._amenities: List[Amenity] = []
        self._vehicles: Optional[VehicleCatalog] = None
        self._loaded = False

    @classmethod
    def from_spots(cls, spots: List[ParkingSpot], vehicles: VehicleCatalog = None) -> "Catalog":
        """A catalog that never goes to the network."""
        catalog = cls()
        catalog._set_spots(spots)
        catalog._vehicles = vehicles
        return catalog

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def spots(self) -> List[ParkingSpot]:
        return list(self._spots.values())

    @property
    def amenities(self) -> List[Amenity]:
        return list(self._amenities)

    def get(self, spot_id: str) -> Optional[ParkingSpot]:
        return self._spots.get(spot_id)

    def capacities(self, spot_id: str) -> Optional[Capacities]:
        spot = self.get(spot_id)
        if spot is None:
            return None
        return Capacities.from_spot(spot)

    async def load(self, refresh: bool = False) -> Result[List[ParkingSpot]]:
        if self._loaded and not refresh:
            return Success(self.spots)
        if self._client is None:
            return Success(self.spots)

        result = await self._client.fetch_parking_spots()
        if not result.ok:
            return result
        document = result.value
        self._set_spots(document.parking_spots)
        self._amenities = document.amenities_master
        logger.info(f"Loaded {len(self._spots)} parking spots from catalog")
        return Success(self.spots)

    async def vehicle_catalog(self, refresh: bool = False) -> Result[VehicleCatalog]:
        if self._vehicles is not None and not refresh:
            return Success(self._vehicles)
        if self._client is None:
            return Failure(PersistenceFailure("No vehicle catalog configured"))

        result = await self._client.fetch_vehicle_catalog()
        if result.ok:
            self._vehicles = result.value
        return result

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    def _set_spots(self, spots: List[ParkingSpot]) -> None:
        self._spots = {spot.id: spot for spot in spots}
        self._loaded = True
