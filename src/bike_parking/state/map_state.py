"""
Map view state: loaded spots, placement filters, and loading/error flags.

State changes go through ``reduce`` so that any renderer can subscribe to
snapshots instead of reaching into mutable fields.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from bike_parking.config.settings import DEFAULT_MAX_SPOTS
from bike_parking.domain.filters import PlacementFilter, visible_spots
from bike_parking.domain.models import ParkingSpot
from bike_parking.parsing.exceptions import GeoJSONDecodeError
from bike_parking.repositories.exceptions import StorageError
from bike_parking.services.spots import ParkingSpotService

logger = logging.getLogger(__name__)


class MapState(BaseModel):
    """Immutable snapshot of everything the map screen shows."""

    model_config = ConfigDict(frozen=True)

    spots: tuple[ParkingSpot, ...] = ()
    placement_filter: PlacementFilter = Field(default_factory=PlacementFilter)
    is_loading: bool = False
    error_message: str | None = None
    # Bumped on every LoadStarted; completions from older loads are ignored.
    generation: int = 0

    @property
    def visible(self) -> list[ParkingSpot]:
        return visible_spots(self.spots, self.placement_filter)


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class LoadSucceeded:
    spots: Sequence[ParkingSpot]
    generation: int


@dataclass(frozen=True)
class LoadFailed:
    message: str
    generation: int


@dataclass(frozen=True)
class FilterToggled:
    placement: str


@dataclass(frozen=True)
class FiltersCleared:
    pass


MapEvent = LoadStarted | LoadSucceeded | LoadFailed | FilterToggled | FiltersCleared


def truncate_spots(spots: Sequence[ParkingSpot], max_spots: int) -> list[ParkingSpot]:
    """Keep the first max_spots spots in source order."""
    if max_spots < 1:
        raise ValueError(f"max_spots must be positive, got {max_spots}")
    if len(spots) > max_spots:
        logger.warning("Keeping first %d of %d spots", max_spots, len(spots))
    return list(spots[:max_spots])


def reduce(state: MapState, event: MapEvent, *, max_spots: int = DEFAULT_MAX_SPOTS) -> MapState:
    """Apply one event to a snapshot and return the next snapshot."""
    if isinstance(event, LoadStarted):
        return state.model_copy(
            update={
                "is_loading": True,
                "error_message": None,
                "generation": state.generation + 1,
            }
        )

    if isinstance(event, LoadSucceeded):
        if event.generation != state.generation:
            return state
        return state.model_copy(
            update={
                "spots": tuple(truncate_spots(event.spots, max_spots)),
                "is_loading": False,
                "error_message": None,
            }
        )

    if isinstance(event, LoadFailed):
        if event.generation != state.generation:
            return state
        # The previous list stays on screen.
        return state.model_copy(
            update={"is_loading": False, "error_message": event.message}
        )

    if isinstance(event, FilterToggled):
        return state.model_copy(
            update={"placement_filter": state.placement_filter.toggle(event.placement)}
        )

    if isinstance(event, FiltersCleared):
        return state.model_copy(
            update={"placement_filter": state.placement_filter.clear()}
        )

    raise TypeError(f"Unknown map event: {event!r}")


def failure_message(exc: Exception) -> str:
    """User-facing text for a failed reload."""
    if isinstance(exc, GeoJSONDecodeError):
        return "Bike parking data could not be read."
    return f"Could not load bike parking data: {exc}"


Listener = Callable[[MapState], None]


class ParkingMapStore:
    """
    Owns the current MapState and notifies subscribers on change.

    All dispatches must happen on the event loop that owns the store;
    ``reload`` runs the blocking download in a worker thread and applies the
    result back on that loop.
    """

    def __init__(self, service: ParkingSpotService, *, max_spots: int = DEFAULT_MAX_SPOTS):
        self.service = service
        self.max_spots = max_spots
        self._state = MapState()
        self._listeners: list[Listener] = []

    def snapshot(self) -> MapState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; call the returned function to unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: MapEvent) -> MapState:
        new_state = reduce(self._state, event, max_spots=self.max_spots)
        if new_state is not self._state:
            self._state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self._state

    def toggle_filter(self, placement: str) -> MapState:
        return self.dispatch(FilterToggled(placement))

    def clear_filters(self) -> MapState:
        return self.dispatch(FiltersCleared())

    async def reload(self) -> MapState:
        """
        Fetch and parse the spots again, replacing the list on success.

        If another reload starts before this one finishes, the newer one
        wins and this result is dropped.
        """
        generation = self.dispatch(LoadStarted()).generation
        try:
            spots = await asyncio.to_thread(self.service.fetch_spots)
        except (StorageError, GeoJSONDecodeError) as exc:
            logger.error("Reload %d failed: %s", generation, exc)
            return self.dispatch(LoadFailed(failure_message(exc), generation))
        except Exception:
            self.dispatch(LoadFailed("Could not load bike parking data.", generation))
            raise

        state = self.dispatch(LoadSucceeded(spots, generation))
        if state.generation != generation:
            logger.info("Reload %d superseded by %d", generation, state.generation)
        return state
