import pytest

from factories import make_collection, make_feature, make_spot


class StubStorage:
    """In-memory BlobStorage that records what was requested."""

    def __init__(self, payload: bytes = b"", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def fetch_blob(self, path: str, *, max_size: int) -> bytes:
        self.calls.append((path, max_size))
        if self.error is not None:
            raise self.error
        return self.payload


class StubService:
    """Stands in for ParkingSpotService; returns or raises queued results."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    def fetch_spots(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def spot_factory():
    return make_spot


@pytest.fixture
def feature_factory():
    return make_feature


@pytest.fixture
def sample_payload() -> bytes:
    return make_collection(
        [
            make_feature(
                coordinates=[-122.3958, 37.7936],
                properties={
                    "objectid": "101",
                    "address": "100 Market St",
                    "placement": "SIDEWALK",
                    "racks": "2",
                    "spaces": "4",
                },
            ),
            make_feature(
                coordinates=None,
                properties={
                    "objectid": "102",
                    "address": "5th & Mission Garage",
                    "placement": "GARAGE",
                    "racks": "10",
                    "spaces": "20",
                    "lat": "37.7833",
                    "lon": "-122.4056",
                },
            ),
            make_feature(coordinates=None, properties={"objectid": "103"}),
            make_feature(
                coordinates=[-122.4194, 37.7749],
                properties={
                    "objectid": "104",
                    "address": "Valencia St",
                    "placement": "Parklet",
                    "racks": "abc",
                },
            ),
        ]
    )


@pytest.fixture
def stub_storage_factory():
    return StubStorage


@pytest.fixture
def stub_service_factory():
    return StubService
