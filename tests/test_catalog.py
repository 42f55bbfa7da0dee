"""Tests for the catalog client and cache."""

import httpx
import pytest

from parkover.enums import VehicleType
from parkover.errors import PersistenceFailure, TransientIO
from parkover.services.catalog import Catalog, CatalogClient

SPOTS_DOCUMENT = {
    "parkingSpots": [
        {
            "id": "ps_001",
            "name": "Phoenix Mall Parking",
            "address": "Whitefield",
            "latitude": 12.99,
            "longitude": 77.72,
            "pricePerHourTwoWheeler": 20,
            "pricePerHourFourWheeler": 50,
            "pricePerHourHeavy": 100,
            "totalSpotsTwoWheeler": 40,
            "totalSpotsFourWheeler": 100,
            "totalSpotsHeavy": 5,
            "floors": [
                {"floorNumber": 0, "name": "Ground", "totalSpots": 20},
                {"floorNumber": -1, "name": "Basement 1", "totalSpots": 30, "priceMultiplier": 0.8},
            ],
            "amenities": ["cctv", "ev_charging"],
            "rating": 4.5,
            "operatingHours": {"is24Hours": True, "openTime": "00:00", "closeTime": "23:59"},
        }
    ],
    "amenitiesMaster": [{"id": "cctv", "name": "CCTV", "icon": "ic_cctv"}],
}

VEHICLES_DOCUMENT = {
    "vehicleTypes": [{"type": "TWO_WHEELER", "displayName": "Two Wheeler"}],
    "presetVehicles": [
        {"id": "preset_1", "type": "TWO_WHEELER", "brand": "Honda", "model": "Activa"}
    ],
}


def make_client(handler) -> CatalogClient:
    return CatalogClient(base_url="http://catalog.test", transport=httpx.MockTransport(handler))


def serve_documents(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/parking-spots.json":
        return httpx.Response(200, json=SPOTS_DOCUMENT)
    if request.url.path == "/vehicles.json":
        return httpx.Response(200, json=VEHICLES_DOCUMENT)
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_fetch_parking_spots_parses_camel_case():
    client = make_client(serve_documents)
    result = await client.fetch_parking_spots()
    await client.aclose()

    assert result.ok
    spot = result.value.parking_spots[0]
    assert spot.id == "ps_001"
    assert spot.total_spots_four_wheeler == 100
    assert spot.available_spots_four_wheeler == 100
    assert spot.operating_hours.is_24_hours
    assert spot.get_floor(-1).price_multiplier == 0.8
    assert result.value.amenities_master[0].name == "CCTV"


@pytest.mark.asyncio
async def test_fetch_vehicle_catalog():
    client = make_client(serve_documents)
    result = await client.fetch_vehicle_catalog()
    await client.aclose()

    assert result.ok
    assert result.value.preset_vehicles[0].type == VehicleType.TWO_WHEELER


@pytest.mark.asyncio
async def test_server_error_is_transient():
    client = make_client(lambda request: httpx.Response(503))
    result = await client.fetch_parking_spots()
    await client.aclose()

    assert isinstance(result.error, TransientIO)
    assert result.error.retryable


@pytest.mark.asyncio
async def test_network_error_is_transient():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(refuse)
    result = await client.fetch_parking_spots()
    await client.aclose()

    assert isinstance(result.error, TransientIO)


@pytest.mark.asyncio
async def test_malformed_document_is_persistence_failure():
    client = make_client(lambda request: httpx.Response(200, content=b"<html>"))
    result = await client.fetch_parking_spots()
    await client.aclose()

    assert isinstance(result.error, PersistenceFailure)


@pytest.mark.asyncio
async def test_invalid_spot_is_persistence_failure():
    document = {"parkingSpots": [{"name": "no id"}]}
    client = make_client(lambda request: httpx.Response(200, json=document))
    result = await client.fetch_parking_spots()
    await client.aclose()

    assert isinstance(result.error, PersistenceFailure)


@pytest.mark.asyncio
async def test_catalog_loads_once():
    """Test the catalog is fetched once per session unless refreshed."""
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return serve_documents(request)

    catalog = Catalog(make_client(handler))
    assert not catalog.loaded

    first = await catalog.load()
    second = await catalog.load()
    assert first.ok and second.ok
    assert len(calls) == 1

    await catalog.load(refresh=True)
    assert len(calls) == 2

    assert catalog.get("ps_001").name == "Phoenix Mall Parking"
    assert catalog.get("unknown") is None
    assert catalog.amenities[0].id == "cctv"
    await catalog.aclose()


@pytest.mark.asyncio
async def test_catalog_capacities():
    catalog = Catalog(make_client(serve_documents))
    await catalog.load()

    capacities = catalog.capacities("ps_001")
    assert capacities.for_type(VehicleType.TWO_WHEELER) == 40
    assert capacities.floors == {"0": 20, "-1": 30}
    assert catalog.capacities("unknown") is None
    await catalog.aclose()


@pytest.mark.asyncio
async def test_failed_load_keeps_catalog_empty():
    catalog = Catalog(make_client(lambda request: httpx.Response(500)))
    result = await catalog.load()

    assert not result.ok
    assert catalog.spots == []
    assert not catalog.loaded
    await catalog.aclose()


@pytest.mark.asyncio
async def test_static_catalog_has_no_vehicle_document(make_spot):
    catalog = Catalog.from_spots([make_spot()])
    assert catalog.loaded
    assert (await catalog.load()).value[0].id == "spot-1"
    assert isinstance((await catalog.vehicle_catalog()).error, PersistenceFailure)
