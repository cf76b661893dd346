"""Blob storage clients for the parking GeoJSON."""

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import requests
from pydantic import BaseModel

from bike_parking.config.settings import StorageSettings
from bike_parking.repositories.exceptions import (
    BlobNotFoundError,
    EmptyPayloadError,
    PayloadTooLargeError,
    StorageAuthenticationError,
    StorageConnectionError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@runtime_checkable
class BlobStorage(Protocol):
    """Anything that can hand back the full contents of one stored object."""

    def fetch_blob(self, path: str, *, max_size: int) -> bytes: ...


class SupabaseStorageSettings(BaseModel):
    """Settings for Supabase Storage access."""

    url: str
    key: str
    bucket: str = "bike-parking"
    public: bool = False

    def object_endpoint(self, path: str) -> str:
        prefix = "object/public" if self.public else "object"
        return (
            f"{self.url.rstrip('/')}/storage/v1/{prefix}/"
            f"{quote(self.bucket)}/{quote(path.lstrip('/'))}"
        )


def _check_empty(path: str, data: bytes) -> bytes:
    if not data:
        raise EmptyPayloadError(f"No data returned from storage for {path}")
    return data


class SupabaseStorageRepository:
    """Reads objects from a Supabase Storage bucket over its REST API."""

    def __init__(self, settings: SupabaseStorageSettings):
        self.settings = settings
        self.session = requests.Session()
        self.session.headers.update(
            {
                "apikey": settings.key,
                "Authorization": f"Bearer {settings.key}",
            }
        )

    def fetch_blob(self, path: str, *, max_size: int) -> bytes:
        """
        Download one object in full.

        Args:
            path: Object path inside the bucket
            max_size: Largest payload accepted, in bytes

        Returns:
            The raw object bytes

        Raises:
            StorageConnectionError: If storage is unreachable or errors out
            StorageAuthenticationError: If the key is rejected
            BlobNotFoundError: If no object exists at the path
            PayloadTooLargeError: If the object exceeds max_size
            EmptyPayloadError: If the object has no content
        """
        endpoint = self.settings.object_endpoint(path)
        try:
            with self.session.get(endpoint, stream=True, timeout=(5, 30)) as response:
                self._raise_for_status(response, path)

                declared = response.headers.get("Content-Length")
                if declared is not None and declared.isdigit() and int(declared) > max_size:
                    raise PayloadTooLargeError(
                        f"Object {path} is {declared} bytes, limit is {max_size}"
                    )

                buffer = bytearray()
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    buffer.extend(chunk)
                    if len(buffer) > max_size:
                        raise PayloadTooLargeError(
                            f"Object {path} exceeds the {max_size} byte limit"
                        )
        except requests.exceptions.RequestException as exc:
            raise StorageConnectionError("Unable to connect to storage") from exc

        logger.info("Downloaded %s, size = %d bytes", path, len(buffer))
        return _check_empty(path, bytes(buffer))

    @staticmethod
    def _raise_for_status(response: requests.Response, path: str) -> None:
        if response.status_code in {401, 403}:
            raise StorageAuthenticationError("Storage authentication failed")
        # Supabase answers 400 with a "not_found" body for missing objects
        if response.status_code == 404 or (
            response.status_code == 400 and "not_found" in response.text
        ):
            raise BlobNotFoundError(f"No object found at {path}")
        if response.status_code >= 500:
            raise StorageConnectionError("Storage request failed")
        if not response.ok:
            raise StorageConnectionError(f"Storage error: {response.text}")


class LocalFileStorage:
    """Reads objects from a directory on the local filesystem."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def fetch_blob(self, path: str, *, max_size: int) -> bytes:
        target = self.root / path.lstrip("/")
        try:
            with target.open("rb") as handle:
                size = os.fstat(handle.fileno()).st_size
                if size > max_size:
                    raise PayloadTooLargeError(
                        f"Object {path} is {size} bytes, limit is {max_size}"
                    )
                data = handle.read(max_size + 1)
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"No object found at {path}") from exc
        except PermissionError as exc:
            raise StorageAuthenticationError(f"Permission denied reading {path}") from exc
        except IsADirectoryError as exc:
            raise BlobNotFoundError(f"{path} is a directory") from exc
        except OSError as exc:
            raise StorageConnectionError(f"Unable to read {path}") from exc

        # The file may have grown between fstat() and read()
        if len(data) > max_size:
            raise PayloadTooLargeError(f"Object {path} exceeds the {max_size} byte limit")

        logger.info("Read %s, size = %d bytes", target, len(data))
        return _check_empty(path, data)


def storage_from_settings(settings: StorageSettings) -> BlobStorage:
    """Build the storage client selected by the settings."""
    if settings.backend == "supabase":
        if not settings.url or not settings.key:
            raise RuntimeError("Supabase storage requires SUPABASE_URL and SUPABASE_KEY")
        return SupabaseStorageRepository(
            SupabaseStorageSettings(
                url=settings.url,
                key=settings.key,
                bucket=settings.bucket,
                public=settings.public_bucket,
            )
        )
    return LocalFileStorage(settings.data_dir)
