"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from bike_parking.api import routes
from bike_parking.api.dependencies import build_store, store_dependency
from bike_parking.api.models import (
    FilterStatus,
    LoadStatus,
    MarkersResponse,
    PlacementOption,
    SpotsResponse,
)
from bike_parking.config.settings import AppSettings, get_settings
from bike_parking.state.map_state import ParkingMapStore

logger = logging.getLogger(__name__)


def create_app(
    store: ParkingMapStore | None = None,
    settings: AppSettings | None = None,
    *,
    load_on_startup: bool = True,
) -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    Args:
        store: Pre-built map store; built from settings when omitted
        settings: Application settings; read from the environment when omitted
        load_on_startup: Whether to fetch the spots when the app starts

    Returns:
        Configured FastAPI instance
    """
    if settings is None:
        settings = get_settings()
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if load_on_startup:
            state = await app.state.store.reload()
            if state.error_message:
                logger.warning("Initial load failed: %s", state.error_message)
        yield

    app = FastAPI(title="Bike Parking API", lifespan=lifespan)
    app.state.store = store

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoints
    @app.get("/health")
    @app.head("/health")
    def health_check():
        """Health check endpoint for monitoring and load balancers."""
        return {"status": "ok"}

    # Store-touching handlers are async so they run on the loop that owns the store.

    @app.get("/placements", response_model=list[PlacementOption])
    async def placements_route(store=Depends(store_dependency)):
        return routes.list_placements(store)

    @app.get("/spots", response_model=SpotsResponse)
    async def spots_route(
        placement: list[str] | None = Query(default=None),
        store=Depends(store_dependency),
    ):
        return routes.list_spots(store, placement)

    @app.get("/markers", response_model=MarkersResponse)
    async def markers_route(
        placement: list[str] | None = Query(default=None),
        store=Depends(store_dependency),
    ):
        return routes.list_markers(store, placement)

    @app.post("/filters/{placement}/toggle", response_model=FilterStatus)
    async def toggle_filter_route(placement: str, store=Depends(store_dependency)):
        return routes.toggle_filter(store, placement)

    @app.delete("/filters", response_model=FilterStatus)
    async def clear_filters_route(store=Depends(store_dependency)):
        return routes.clear_filters(store)

    @app.get("/status", response_model=LoadStatus)
    async def status_route(store=Depends(store_dependency)):
        return routes.load_status(store)

    @app.post("/reload", response_model=LoadStatus)
    async def reload_route(store=Depends(store_dependency)):
        return await routes.reload_spots(store)

    return app
