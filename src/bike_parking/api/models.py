"""API request and response models."""

from pydantic import BaseModel

from bike_parking.domain.models import ParkingSpot
from bike_parking.domain.placements import (
    PLACEMENT_OPTIONS,
    Marker,
    display_name,
    icon_name,
)
from bike_parking.state.map_state import MapState


class PlacementOption(BaseModel):
    """One entry of the placement filter vocabulary."""

    value: str
    label: str
    icon: str
    active: bool

    @staticmethod
    def build_all(state: MapState) -> list["PlacementOption"]:
        return [
            PlacementOption(
                value=option,
                label=display_name(option),
                icon=icon_name(option),
                active=option in state.placement_filter,
            )
            for option in PLACEMENT_OPTIONS
        ]


class FilterStatus(BaseModel):
    """Current session filter and how many spots it leaves visible."""

    active_filters: list[str]
    total: int
    visible: int

    @staticmethod
    def build(state: MapState) -> "FilterStatus":
        return FilterStatus(
            active_filters=sorted(state.placement_filter.active),
            total=len(state.spots),
            visible=len(state.visible),
        )


class SpotsResponse(BaseModel):
    """Response model for the visible parking spots."""

    active_filters: list[str]
    total: int
    spots: list[ParkingSpot]


class MarkersResponse(BaseModel):
    """Response model for render-ready map markers."""

    active_filters: list[str]
    total: int
    markers: list[Marker]


class LoadStatus(BaseModel):
    """Response model describing the last load."""

    is_loading: bool
    error_message: str | None
    total: int
    generation: int

    @staticmethod
    def build(state: MapState) -> "LoadStatus":
        return LoadStatus(
            is_loading=state.is_loading,
            error_message=state.error_message,
            total=len(state.spots),
            generation=state.generation,
        )
