"""Placement vocabulary and the marker text/icons derived from it."""

from pydantic import BaseModel, ConfigDict

from bike_parking.domain.models import ParkingSpot

PLACEMENT_OPTIONS: tuple[str, ...] = (
    "SIDEWALK",
    "GARAGE",
    "GARAGE CAGE",
    "ROADWAY",
    "PARKLET",
    "PARCEL",
)

DEFAULT_ICON = "icon_default"

_ICON_LOOKUP: dict[str, str] = {
    "SIDEWALK": "icon_sidewalk",
    "GARAGE": "icon_garage",
    "GARAGE CAGE": "icon_cage",
    "ROADWAY": "icon_roadway",
    "PARKLET": "icon_parklet",
    "PARCEL": "icon_parcel",
}

_LABEL_LOOKUP: dict[str, str] = {
    "SIDEWALK": "Sidewalk",
    "GARAGE": "Garage",
    "GARAGE CAGE": "Garage Cage",
    "ROADWAY": "Roadway",
    "PARKLET": "Parklet",
    "PARCEL": "Parcel",
}


def normalize_placement(placement: str) -> str:
    """Case-fold a placement value for comparison against the vocabulary."""
    return placement.strip().upper()


def is_known_placement(placement: str) -> bool:
    return normalize_placement(placement) in _ICON_LOOKUP


def icon_name(placement: str) -> str:
    """Marker icon asset name for a placement; unknown values get the default icon."""
    return _ICON_LOOKUP.get(normalize_placement(placement), DEFAULT_ICON)


def display_name(placement: str) -> str:
    """Human-readable label, e.g. "GARAGE CAGE" -> "Garage Cage"."""
    label = _LABEL_LOOKUP.get(normalize_placement(placement))
    if label is not None:
        return label
    return placement.title()


class Marker(BaseModel):
    """What a map renderer needs to draw one spot."""

    model_config = ConfigDict(frozen=True)

    id: str
    latitude: float
    longitude: float
    title: str
    snippet: str
    icon: str


def marker_snippet(spot: ParkingSpot) -> str:
    return f"Racks: {spot.racks} | Spaces: {spot.spaces}\nPlacement: {spot.placement}"


def spot_to_marker(spot: ParkingSpot) -> Marker:
    return Marker(
        id=spot.id,
        latitude=spot.latitude,
        longitude=spot.longitude,
        title=spot.address,
        snippet=marker_snippet(spot),
        icon=icon_name(spot.placement),
    )
