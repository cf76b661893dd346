"""Placement filter state and the visible subset it selects."""

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from bike_parking.domain.models import ParkingSpot
from bike_parking.domain.placements import normalize_placement


class PlacementFilter(BaseModel):
    """
    Active placement selections, stored upper-cased.

    An empty selection means "show everything".
    """

    model_config = ConfigDict(frozen=True)

    active: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def of(cls, placements: Iterable[str]) -> "PlacementFilter":
        return cls(active=frozenset(normalize_placement(p) for p in placements))

    @property
    def is_empty(self) -> bool:
        return not self.active

    def __contains__(self, placement: object) -> bool:
        if not isinstance(placement, str):
            return False
        return normalize_placement(placement) in self.active

    def toggle(self, placement: str) -> "PlacementFilter":
        """Add the placement if absent, remove it if present."""
        return PlacementFilter(active=self.active ^ {normalize_placement(placement)})

    def clear(self) -> "PlacementFilter":
        return PlacementFilter()

    def matches(self, spot: ParkingSpot) -> bool:
        if self.is_empty:
            return True
        return normalize_placement(spot.placement) in self.active


def visible_spots(
    spots: Sequence[ParkingSpot], placement_filter: PlacementFilter
) -> list[ParkingSpot]:
    """
    Spots that should currently be shown.

    With no active filter every spot is visible, in the original order.
    Spots with placements outside the vocabulary only show when no filter
    is active.
    """
    if placement_filter.is_empty:
        return list(spots)
    return [spot for spot in spots if placement_filter.matches(spot)]
