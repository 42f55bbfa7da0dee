"""Tests for the availability projector."""

from datetime import datetime, timezone

import pytest
from geopy.distance import great_circle

from parkover.enums import AvailabilityStatus, VehicleType
from parkover.schemas.availability import AvailabilityResponse
from parkover.services.catalog import Catalog
from parkover.services.projector import AvailabilityProjector, merge_availability

ORIGIN = (12.9716, 77.5946)


def point_east(km: float):
    """A point ``km`` due east of the origin."""
    point = great_circle(kilometers=km).destination(ORIGIN, bearing=90)
    return point.latitude, point.longitude


def record(spot_id: str, **counters) -> AvailabilityResponse:
    values = {
        "available_spots_two_wheeler": 10,
        "available_spots_four_wheeler": 20,
        "available_spots_heavy": 5,
        "floor_availability": {},
    }
    values.update(counters)
    return AvailabilityResponse(
        spot_id=spot_id, last_updated=datetime.now(timezone.utc), **values
    )


def test_merge_overlays_counters(make_spot):
    """Test catalog totals stay and available counts come from the record."""
    spot = make_spot(four_wheeler=100)
    merged = merge_availability(
        [spot],
        {spot.id: record(spot.id, available_spots_four_wheeler=37, floor_availability={"1": 4})},
    )

    assert merged[0].total_spots_four_wheeler == 100
    assert merged[0].available_spots_four_wheeler == 37
    assert merged[0].get_floor(1).available_spots == 4
    # No floor key, full floor
    assert merged[0].get_floor(2).available_spots == 10
    # Input is untouched
    assert spot.available_spots_four_wheeler == 100


def test_merge_without_record_shows_full_capacity(make_spot):
    spot = make_spot()
    merged = merge_availability([spot], {})
    assert merged[0].available_spots_two_wheeler == 10
    assert merged[0].available_spots_heavy == 5
    assert merged[0].availability_status() == AvailabilityStatus.AVAILABLE


def test_merge_clamps_counters_to_totals(make_spot):
    spot = make_spot(heavy=2)
    merged = merge_availability([spot], {spot.id: record(spot.id, available_spots_heavy=9)})
    assert merged[0].available_spots_heavy == 2


def test_merge_drives_availability_status(make_spot):
    spot = make_spot(two_wheeler=10, four_wheeler=0, heavy=0)
    limited = merge_availability(
        [spot], {spot.id: record(spot.id, available_spots_two_wheeler=1)}
    )
    full = merge_availability([spot], {spot.id: record(spot.id, available_spots_two_wheeler=0)})
    assert limited[0].availability_status() == AvailabilityStatus.LIMITED
    assert full[0].availability_status() == AvailabilityStatus.FULL


@pytest.mark.asyncio
async def test_load_catalog_backfills_and_merges(availability_store, make_spot):
    """Test loading the catalog creates missing records and publishes a snapshot."""
    catalog = Catalog.from_spots([make_spot("a"), make_spot("b")])
    projector = AvailabilityProjector(catalog, availability_store)

    result = await projector.load_catalog()
    assert result.ok
    assert {spot.id for spot in projector.latest} == {"a", "b"}
    assert (await availability_store.existing_ids()).unwrap() == {"a", "b"}


@pytest.mark.asyncio
async def test_projector_follows_availability_changes(availability_store, spot):
    """Test each committed change republishes the merged list."""
    projector = AvailabilityProjector(Catalog.from_spots([spot]), availability_store)
    await projector.load_catalog()
    projector.start()

    subscription = projector.subscribe()
    initial = await subscription.next(timeout=5)
    assert initial[0].available_spots_four_wheeler == 20

    await availability_store.decrease(spot.id, VehicleType.FOUR_WHEELER, floor_number=1)

    # Skip the feed's own initial emission if it lands first
    snapshot = await subscription.next(timeout=5)
    while snapshot[0].available_spots_four_wheeler == 20:
        snapshot = await subscription.next(timeout=5)
    assert snapshot[0].available_spots_four_wheeler == 19
    assert snapshot[0].get_floor(1).available_spots == 9
    assert projector.get_spot(spot.id).available_spots_four_wheeler == 19

    await projector.close()
    assert subscription.cancelled
    assert availability_store.subscriber_count == 0


@pytest.mark.asyncio
async def test_spots_near_filters_and_sorts(availability_store, make_spot):
    """Test proximity search keeps spots within the radius, nearest first."""
    spots = []
    for spot_id, km in (("far", 5.5), ("mid", 2.0), ("near", 0.5)):
        latitude, longitude = point_east(km)
        spots.append(make_spot(spot_id, latitude=latitude, longitude=longitude))
    projector = AvailabilityProjector(Catalog.from_spots(spots), availability_store)
    await projector.load_catalog()

    nearby = projector.spots_near(*ORIGIN)
    assert [spot.id for spot in nearby] == ["near", "mid"]

    wide = projector.spots_near(*ORIGIN, radius_km=10)
    assert [spot.id for spot in wide] == ["near", "mid", "far"]


@pytest.mark.asyncio
async def test_spots_near_before_load_is_empty(availability_store, spot):
    projector = AvailabilityProjector(Catalog.from_spots([spot]), availability_store)
    assert projector.latest is None
    assert projector.spots_near(*ORIGIN) == []
    assert projector.get_spot(spot.id) is None
