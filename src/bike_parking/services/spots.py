"""Fetch-and-parse orchestration for parking spots."""

import logging

from pydantic import BaseModel, Field

from bike_parking.config.settings import DEFAULT_BLOB_PATH, DEFAULT_MAX_BYTES
from bike_parking.domain.models import ParkingSpot
from bike_parking.parsing.geojson import parse_spots
from bike_parking.repositories.storage import BlobStorage

logger = logging.getLogger(__name__)


class ParkingSpotService(BaseModel):
    """Downloads the parking GeoJSON and turns it into ParkingSpot records."""

    storage: BlobStorage
    blob_path: str = DEFAULT_BLOB_PATH
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)

    model_config = {"arbitrary_types_allowed": True}

    def fetch_spots(self) -> list[ParkingSpot]:
        """
        Fetch the configured blob and normalize it.

        Raises:
            StorageError: If the download fails or returns nothing
            GeoJSONDecodeError: If the payload is not a FeatureCollection
        """
        logger.info("Fetching %s (limit %d bytes)", self.blob_path, self.max_bytes)
        data = self.storage.fetch_blob(self.blob_path, max_size=self.max_bytes)
        return parse_spots(data)
