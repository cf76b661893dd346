"""API route handlers."""

from fastapi import HTTPException

from bike_parking.api.models import (
    FilterStatus,
    LoadStatus,
    MarkersResponse,
    PlacementOption,
    SpotsResponse,
)
from bike_parking.domain.filters import PlacementFilter, visible_spots
from bike_parking.domain.models import ParkingSpot
from bike_parking.domain.placements import spot_to_marker
from bike_parking.state.map_state import MapState, ParkingMapStore


def _select(
    state: MapState, placements: list[str] | None
) -> tuple[PlacementFilter, list[ParkingSpot]]:
    # Explicit query placements take precedence over the session filter
    placement_filter = (
        PlacementFilter.of(placements) if placements else state.placement_filter
    )
    return placement_filter, visible_spots(state.spots, placement_filter)


def list_placements(store: ParkingMapStore) -> list[PlacementOption]:
    """GET /placements endpoint."""
    return PlacementOption.build_all(store.snapshot())


def list_spots(store: ParkingMapStore, placements: list[str] | None = None) -> SpotsResponse:
    """
    Core logic for listing visible spots.

    Args:
        store: Map store instance
        placements: Optional placement values overriding the session filter

    Returns:
        SpotsResponse with the visible spots in source order
    """
    state = store.snapshot()
    placement_filter, spots = _select(state, placements)
    return SpotsResponse(
        active_filters=sorted(placement_filter.active),
        total=len(state.spots),
        spots=spots,
    )


def list_markers(store: ParkingMapStore, placements: list[str] | None = None) -> MarkersResponse:
    """GET /markers endpoint."""
    state = store.snapshot()
    placement_filter, spots = _select(state, placements)
    return MarkersResponse(
        active_filters=sorted(placement_filter.active),
        total=len(state.spots),
        markers=[spot_to_marker(spot) for spot in spots],
    )


def toggle_filter(store: ParkingMapStore, placement: str) -> FilterStatus:
    """POST /filters/{placement}/toggle endpoint."""
    if not placement.strip():
        raise HTTPException(status_code=400, detail="Placement must not be blank")
    return FilterStatus.build(store.toggle_filter(placement))


def clear_filters(store: ParkingMapStore) -> FilterStatus:
    """DELETE /filters endpoint."""
    return FilterStatus.build(store.clear_filters())


def load_status(store: ParkingMapStore) -> LoadStatus:
    """GET /status endpoint."""
    return LoadStatus.build(store.snapshot())


async def reload_spots(store: ParkingMapStore) -> LoadStatus:
    """
    POST /reload endpoint.

    Raises:
        HTTPException: 502 when the download or decode failed; the previously
            loaded spots stay in place.
    """
    state = await store.reload()
    if state.error_message is not None:
        raise HTTPException(status_code=502, detail=state.error_message)
    return LoadStatus.build(state)
