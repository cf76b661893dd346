"""Fetch the bike parking data once and print what the map would show.

Usage:
    bike-parking                                  # every marker as JSON
    bike-parking --placement garage --placement "garage cage"
    bike-parking --format summary                 # counts per placement

Environment variables (loaded from .env):
    BIKE_PARKING_STORAGE_BACKEND - "local" (default) or "supabase"
    BIKE_PARKING_DATA_DIR - directory holding the GeoJSON for the local backend
    SUPABASE_URL, SUPABASE_KEY, BIKE_PARKING_BUCKET - Supabase Storage access
"""

import argparse
import json
import logging
import sys
from collections import Counter

from bike_parking.api.dependencies import build_service
from bike_parking.config.settings import get_settings
from bike_parking.domain.filters import PlacementFilter, visible_spots
from bike_parking.domain.models import ParkingSpot
from bike_parking.domain.placements import (
    display_name,
    normalize_placement,
    spot_to_marker,
)
from bike_parking.parsing.exceptions import GeoJSONDecodeError
from bike_parking.repositories.exceptions import StorageError
from bike_parking.state.map_state import truncate_spots

logger = logging.getLogger("bike_parking")


def positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {parsed}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load bike parking spots and print the visible markers"
    )
    parser.add_argument(
        "--placement",
        action="append",
        default=[],
        help="Only show this placement (repeatable, case-insensitive)",
    )
    parser.add_argument(
        "--format",
        choices=("json", "summary"),
        default="json",
        help="Print markers as JSON or a per-placement count",
    )
    parser.add_argument(
        "--limit",
        type=positive_int,
        default=None,
        help="Maximum number of spots to keep after loading (default from settings)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def summarize(spots: list[ParkingSpot]) -> str:
    counts = Counter(normalize_placement(spot.placement) for spot in spots)
    lines = [f"{len(spots)} spots"]
    for placement, count in counts.most_common():
        lines.append(f"  {display_name(placement)}: {count}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s"
    )

    try:
        settings = get_settings()
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1

    service = build_service(settings)
    try:
        spots = service.fetch_spots()
    except (StorageError, GeoJSONDecodeError) as exc:
        logger.error("Failed to load bike parking data: %s", exc)
        return 1

    limit = args.limit if args.limit is not None else settings.max_spots
    spots = truncate_spots(spots, limit)
    visible = visible_spots(spots, PlacementFilter.of(args.placement))
    logger.info("Showing %d of %d spots", len(visible), len(spots))

    if args.format == "summary":
        print(summarize(visible))
    else:
        markers = [spot_to_marker(spot).model_dump() for spot in visible]
        print(json.dumps(markers, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
