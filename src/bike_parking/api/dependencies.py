"""FastAPI dependency injection setup."""

from fastapi import HTTPException, Request

from bike_parking.config.settings import AppSettings
from bike_parking.repositories.storage import storage_from_settings
from bike_parking.services.spots import ParkingSpotService
from bike_parking.state.map_state import ParkingMapStore


def build_service(settings: AppSettings) -> ParkingSpotService:
    """Wire the storage client and fetch service from settings."""
    return ParkingSpotService(
        storage=storage_from_settings(settings.storage),
        blob_path=settings.storage.blob_path,
        max_bytes=settings.storage.max_bytes,
    )


def build_store(settings: AppSettings) -> ParkingMapStore:
    """Wire storage, service and store together from settings."""
    return ParkingMapStore(build_service(settings), max_spots=settings.max_spots)


def store_dependency(request: Request) -> ParkingMapStore:
    """FastAPI dependency for the store owned by the running app."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Map store is not initialized")
    return store
