"""
API layer - HTTP interface.

Run with: uvicorn bike_parking.api:create_app --factory
"""

from bike_parking.api.models import (
    FilterStatus as FilterStatus,
    LoadStatus as LoadStatus,
    MarkersResponse as MarkersResponse,
    PlacementOption as PlacementOption,
    SpotsResponse as SpotsResponse,
)
from bike_parking.api.dependencies import (
    build_store as build_store,
    store_dependency as store_dependency,
)
from bike_parking.api.app import create_app as create_app
