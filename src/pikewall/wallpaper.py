"""CLI entry point for wallpaper generation.

    uv run pikewall --lat 48.8566 --lon 2.3522 --name Paris
    uv run pikewall --address "Lac d'Annecy"

Location defaults come from PIKEWALL_* variables (a .env file is honored).
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import httpx
from dotenv import load_dotenv

from pikewall.compute import GeocodingError, run
from pikewall.config import load_settings
from pikewall.models import QueryInput
from pikewall.renderers.static import save_wallpaper
from pikewall.weather import WeatherError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pikewall", description="Render a weather and pike-fishing lock-screen wallpaper"
    )
    parser.add_argument("--lat", type=float, help="Latitude in decimal degrees")
    parser.add_argument("--lon", type=float, help="Longitude in decimal degrees")
    parser.add_argument("--address", help="Address to geocode when no coordinates are given")
    parser.add_argument("--name", help="Header line (defaults to the geocoded place)")
    parser.add_argument("--region", help="Sub-header line")
    parser.add_argument("--output", type=Path, help="PNG path (defaults to results/)")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        help="Instant to render for, ISO format; naive values are local to the location",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    lat, lng = args.lat, args.lon
    if lat is None and lng is None and not args.address:
        lat, lng = settings.lat, settings.lng

    query = QueryInput(
        address=args.address,
        lat=lat,
        lng=lng,
        name=args.name or settings.name or None,
        region=args.region or settings.region or None,
    )

    try:
        with httpx.Client(timeout=settings.http_timeout) as client:
            data = run(query, now=args.now, client=client)
    except GeocodingError as exc:
        logger.error("Location error: %s", exc)
        return 2
    except WeatherError as exc:
        logger.error("%s", exc)
        return 1

    path = save_wallpaper(data, args.output)
    print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
