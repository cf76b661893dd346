import asyncio
import threading

import pytest

from bike_parking.parsing.exceptions import DecodeErrorKind, GeoJSONDecodeError
from bike_parking.repositories.exceptions import EmptyPayloadError, StorageConnectionError
from bike_parking.services.spots import ParkingSpotService
from bike_parking.state.map_state import (
    FiltersCleared,
    FilterToggled,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    MapState,
    ParkingMapStore,
    reduce,
    truncate_spots,
)


def test_service_fetches_configured_blob(stub_storage_factory, sample_payload):
    storage = stub_storage_factory(sample_payload)
    service = ParkingSpotService(storage=storage, blob_path="racks.geojson", max_bytes=512)

    spots = service.fetch_spots()

    assert storage.calls == [("racks.geojson", 512)]
    assert [spot.id for spot in spots] == ["101", "102", "104"]


def test_service_propagates_empty_payload(stub_storage_factory):
    service = ParkingSpotService(
        storage=stub_storage_factory(error=EmptyPayloadError("nothing"))
    )

    with pytest.raises(EmptyPayloadError):
        service.fetch_spots()


def test_load_started_bumps_generation():
    state = reduce(MapState(error_message="old"), LoadStarted())

    assert state.is_loading
    assert state.error_message is None
    assert state.generation == 1


def test_load_succeeded_replaces_spots_and_caps(spot_factory):
    spots = [spot_factory(id=str(i)) for i in range(5)]
    state = reduce(MapState(), LoadStarted())

    state = reduce(state, LoadSucceeded(spots, state.generation), max_spots=3)

    assert [spot.id for spot in state.spots] == ["0", "1", "2"]
    assert not state.is_loading


def test_stale_completion_is_ignored(spot_factory):
    state = reduce(reduce(MapState(), LoadStarted()), LoadStarted())

    after = reduce(state, LoadSucceeded([spot_factory()], generation=1))
    assert after is state

    after = reduce(state, LoadFailed("boom", generation=1))
    assert after is state


def test_load_failed_keeps_previous_spots(spot_factory):
    loaded = reduce(MapState(), LoadStarted())
    loaded = reduce(loaded, LoadSucceeded([spot_factory(id="keep")], loaded.generation))

    retry = reduce(loaded, LoadStarted())
    failed = reduce(retry, LoadFailed("Could not load", retry.generation))

    assert [spot.id for spot in failed.spots] == ["keep"]
    assert failed.error_message == "Could not load"
    assert not failed.is_loading


def test_filter_events_do_not_touch_spots(spot_factory):
    spots = [spot_factory(id="1", placement="GARAGE"), spot_factory(id="2")]
    state = MapState(spots=tuple(spots))

    filtered = reduce(state, FilterToggled("Garage"))
    assert [spot.id for spot in filtered.visible] == ["1"]
    assert filtered.spots == state.spots

    cleared = reduce(filtered, FiltersCleared())
    assert cleared.visible == spots


def test_unknown_event_raises():
    with pytest.raises(TypeError):
        reduce(MapState(), object())


def test_store_reload_success(stub_service_factory, spot_factory):
    store = ParkingMapStore(stub_service_factory([spot_factory(id="a")]))
    seen = []
    store.subscribe(seen.append)

    state = asyncio.run(store.reload())

    assert [spot.id for spot in state.spots] == ["a"]
    assert store.snapshot() is state
    assert [s.is_loading for s in seen] == [True, False]


def test_store_reload_failure_keeps_list(stub_service_factory, spot_factory):
    service = stub_service_factory(
        [spot_factory(id="a")], StorageConnectionError("offline")
    )
    store = ParkingMapStore(service)

    asyncio.run(store.reload())
    state = asyncio.run(store.reload())

    assert [spot.id for spot in state.spots] == ["a"]
    assert state.error_message == "Could not load bike parking data: offline"


def test_store_reload_decode_failure_message(stub_service_factory):
    error = GeoJSONDecodeError(DecodeErrorKind.MALFORMED_DATA, "bad json")
    store = ParkingMapStore(stub_service_factory(error))

    state = asyncio.run(store.reload())

    assert state.error_message == "Bike parking data could not be read."
    assert state.spots == ()


def test_store_unexpected_error_is_reraised(stub_service_factory):
    store = ParkingMapStore(stub_service_factory(KeyError("bug")))

    with pytest.raises(KeyError):
        asyncio.run(store.reload())

    assert not store.snapshot().is_loading


def test_store_unsubscribe(stub_service_factory, spot_factory):
    store = ParkingMapStore(stub_service_factory([spot_factory()]))
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.toggle_filter("GARAGE")
    unsubscribe()
    store.clear_filters()

    assert len(seen) == 1
    assert store.snapshot().placement_filter.is_empty


def test_latest_reload_wins(stub_service_factory, spot_factory):
    release = threading.Event()

    class SlowService:
        def fetch_spots(self):
            release.wait(timeout=5)
            return [spot_factory(id="old")]

    store = ParkingMapStore(SlowService())

    async def scenario():
        first = asyncio.create_task(store.reload())
        await asyncio.sleep(0)
        store.service = stub_service_factory([spot_factory(id="new")])
        second = await store.reload()
        release.set()
        first_result = await first
        return first_result, second

    first_result, second = asyncio.run(scenario())

    assert [spot.id for spot in second.spots] == ["new"]
    assert [spot.id for spot in first_result.spots] == ["new"]
    assert [spot.id for spot in store.snapshot().spots] == ["new"]
    assert store.snapshot().generation == 2


def test_truncate_spots_keeps_source_order(spot_factory):
    spots = [spot_factory(id=str(i)) for i in range(4)]

    assert [spot.id for spot in truncate_spots(spots, 2)] == ["0", "1"]
    assert truncate_spots(spots, 10) == spots


@pytest.mark.parametrize("max_spots", [0, -1])
def test_truncate_spots_rejects_non_positive_cap(spot_factory, max_spots):
    with pytest.raises(ValueError, match="must be positive"):
        truncate_spots([spot_factory()], max_spots)
