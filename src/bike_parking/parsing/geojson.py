"""GeoJSON parsing functions."""

import logging
import math
import re
import uuid
from typing import Any

from pydantic import ValidationError

from bike_parking.domain.models import (
    UNKNOWN_ADDRESS,
    UNKNOWN_PLACEMENT,
    Feature,
    FeatureCollection,
    ParkingSpot,
)
from bike_parking.parsing.exceptions import (
    DecodeErrorKind,
    GeoJSONDecodeError,
    payload_preview,
)

logger = logging.getLogger(__name__)

_COUNT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _decode_error_from_validation(
    exc: ValidationError, data: bytes
) -> GeoJSONDecodeError:
    # Report the first problem; that is enough to locate a broken file.
    first = exc.errors()[0]
    error_type = first.get("type", "")
    path = tuple(first.get("loc", ()))

    if error_type == "json_invalid":
        kind = DecodeErrorKind.MALFORMED_DATA
    elif error_type == "missing":
        kind = DecodeErrorKind.MISSING_KEY
    elif first.get("input", ...) is None:
        kind = DecodeErrorKind.UNEXPECTED_NULL
    else:
        kind = DecodeErrorKind.TYPE_MISMATCH

    return GeoJSONDecodeError(
        kind,
        first.get("msg", str(exc)),
        path=path,
        preview=payload_preview(data),
    )


def decode_feature_collection(data: bytes) -> FeatureCollection:
    """
    Decode raw bytes into a FeatureCollection.

    Args:
        data (bytes): The downloaded GeoJSON payload.

    Returns:
        FeatureCollection: The validated collection.

    Raises:
        GeoJSONDecodeError: If the payload is not JSON or does not match the
            expected FeatureCollection shape.
    """
    try:
        return FeatureCollection.model_validate_json(data)
    except ValidationError as exc:
        error = _decode_error_from_validation(exc, data)
        logger.error("GeoJSON decode error: %s", error)
        logger.error("First %d bytes of payload:\n%s", len(error.preview), error.preview)
        raise error from exc


def parse_coordinate(value: str | None) -> float | None:
    """Parse a lat/lon property; None when absent, unparsable or not finite."""
    if value is None:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def parse_count(value: str | None) -> int:
    """
    Parse a racks/spaces property, falling back to 0.

    Only plain ASCII digits with an optional sign are accepted; whitespace,
    underscores and decimals give 0.
    """
    if value is None or not _COUNT_PATTERN.fullmatch(value):
        return 0
    parsed = int(value)
    return parsed if parsed >= 0 else 0


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers too large for a float
        return False


def resolve_coordinates(feature: Feature) -> tuple[float, float] | None:
    """
    Work out (latitude, longitude) for a feature.

    Point geometry wins; the lat/lon properties fill in whatever is still
    missing. Returns None when either value cannot be found.
    """
    lat: float | None = None
    lon: float | None = None

    if feature.geometry is not None:
        coords = feature.geometry.coordinates
        if len(coords) == 2 and all(_is_number(c) for c in coords):
            lon, lat = float(coords[0]), float(coords[1])

    properties = feature.properties
    if lat is None:
        lat = parse_coordinate(properties.lat)
    if lon is None:
        lon = parse_coordinate(properties.lon)

    if lat is None or lon is None:
        return None
    return lat, lon


def feature_to_spot(feature: Feature) -> ParkingSpot | None:
    """
    Map a GeoJSON feature to a ParkingSpot.

    Args:
        feature (Feature): A decoded GeoJSON feature.

    Returns:
        ParkingSpot | None: The spot, or None if the feature has no usable
            coordinates.
    """
    resolved = resolve_coordinates(feature)
    if resolved is None:
        return None
    latitude, longitude = resolved

    properties = feature.properties
    return ParkingSpot(
        id=properties.objectid or str(uuid.uuid4()),
        placement=properties.placement or UNKNOWN_PLACEMENT,
        address=properties.address or UNKNOWN_ADDRESS,
        racks=parse_count(properties.racks),
        spaces=parse_count(properties.spaces),
        latitude=latitude,
        longitude=longitude,
    )


def collection_to_spots(collection: FeatureCollection) -> list[ParkingSpot]:
    """Map every feature, dropping the ones without coordinates."""
    spots: list[ParkingSpot] = []
    for index, feature in enumerate(collection.features):
        spot = feature_to_spot(feature)
        if spot is None:
            # Incomplete source rows are expected; skip them quietly
            logger.debug("Skipping feature %d: no usable coordinates", index)
            continue
        spots.append(spot)
    return spots


def parse_spots(data: bytes) -> list[ParkingSpot]:
    """
    Parse the bike parking GeoJSON into ParkingSpot records.

    Args:
        data (bytes): The GeoJSON payload to parse.
    """
    collection = decode_feature_collection(data)
    logger.info("Decoded GeoJSON: %d features", len(collection.features))

    spots = collection_to_spots(collection)
    logger.info("Mapped %d bike parking spots", len(spots))
    return spots
