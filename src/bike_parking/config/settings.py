"""Application configuration management."""

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BLOB_PATH = "Bicycle_Parking_Racks_20251116.geojson"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_SPOTS = 2000


class StorageSettings(BaseModel):
    """Where the parking GeoJSON lives and how much of it we accept."""

    backend: Literal["supabase", "local"] = "local"
    url: str | None = None
    key: str | None = None
    bucket: str = "bike-parking"
    public_bucket: bool = False
    data_dir: str = "data"
    blob_path: str = DEFAULT_BLOB_PATH
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)


class CORSSettings(BaseModel):
    """CORS configuration settings."""

    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    @staticmethod
    def from_env_string(cors_origins: str = "") -> "CORSSettings":
        """Parse CORS origins from comma-separated environment variable."""
        if not cors_origins:
            return CORSSettings()
        origins = [o.strip() for o in cors_origins.split(",") if o.strip()]
        return CORSSettings(allowed_origins=origins)


class AppSettings(BaseModel):
    """Application settings."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    # Markers beyond this count are dropped after each load (first N kept).
    max_spots: int = Field(default=DEFAULT_MAX_SPOTS, gt=0)
    cors: CORSSettings = Field(default_factory=CORSSettings)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """
    Get application settings from environment variables.

    Returns:
        AppSettings instance

    Raises:
        RuntimeError: If the Supabase backend is selected without credentials,
            or if any variable holds an invalid value
    """
    load_dotenv()

    backend = os.getenv("BIKE_PARKING_STORAGE_BACKEND", "local").strip().lower()
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")

    if backend == "supabase" and (not url or not key):
        raise RuntimeError(
            "Supabase credentials are not configured. Set SUPABASE_URL and SUPABASE_KEY environment variables."
        )

    try:
        storage = StorageSettings(
            backend=backend,
            url=url,
            key=key,
            bucket=os.getenv("BIKE_PARKING_BUCKET", "bike-parking"),
            public_bucket=_env_flag("BIKE_PARKING_PUBLIC_BUCKET"),
            data_dir=os.getenv("BIKE_PARKING_DATA_DIR", "data"),
            blob_path=os.getenv("BIKE_PARKING_BLOB_PATH", DEFAULT_BLOB_PATH),
            max_bytes=int(os.getenv("BIKE_PARKING_MAX_BYTES", DEFAULT_MAX_BYTES)),
        )

        return AppSettings(
            storage=storage,
            max_spots=int(os.getenv("BIKE_PARKING_MAX_SPOTS", DEFAULT_MAX_SPOTS)),
            cors=CORSSettings.from_env_string(os.getenv("CORS_ORIGINS", "")),
        )
    except ValueError as exc:
        # pydantic's ValidationError is a ValueError too
        raise RuntimeError(f"Invalid bike parking configuration: {exc}") from exc
