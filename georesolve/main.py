"""Command-line entrypoints for the location resolver."""
from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

import orjson
from dotenv import load_dotenv

from georesolve.config import DEFAULT_SETTINGS_PATH, ProviderCredentials, ResolverSettings, load_settings
from georesolve.normalize.gazetteer import GazetteerFallback
from georesolve.normalize.geo import haversine_distance_meters, validate_coordinates
from georesolve.observability.log import configure_logging
from georesolve.observability.metrics import MetricsRegistry
from georesolve.orchestrator.resolver import open_resolver

DEFAULT_LOGGING_CONFIG = Path("config/logging.yaml")


def _print_json(payload: Any) -> None:
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="georesolve", description="Resolve place text to coordinates")
    parser.add_argument("--settings", default=str(DEFAULT_SETTINGS_PATH), help="Path to settings TOML")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Resolve free text or a lat,lon pair")
    resolve.add_argument("text", help="Place description or 'lat,lon'")
    resolve.add_argument("--raw", action="store_true", help="Include the provider payload")
    resolve.add_argument("--metrics-out", help="Write counters to this JSON file")

    reverse = sub.add_parser("reverse", help="Describe a coordinate pair")
    reverse.add_argument("--lat", type=float, required=True)
    reverse.add_argument("--lon", type=float, required=True)

    distance = sub.add_parser("distance", help="Great-circle distance in metres")
    for name in ("lat1", "lon1", "lat2", "lon2"):
        distance.add_argument(name, type=float)

    sub.add_parser("gazetteer", help="List the offline fallback table")

    return parser


async def run_resolve(args: argparse.Namespace, settings: ResolverSettings, credentials: ProviderCredentials) -> int:
    """Execute the resolve command, returning the process exit code."""
    metrics = MetricsRegistry()
    async with open_resolver(settings=settings, credentials=credentials, metrics=metrics) as resolver:
        result = await resolver.resolve(args.text)

    if args.metrics_out:
        run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        metrics.export(path=Path(args.metrics_out), run_id=run_id)

    if result is None:
        _print_json({"query": args.text, "resolved": False})
        return 1
    _print_json(result.to_payload(include_raw=args.raw))
    return 0


async def run_reverse(args: argparse.Namespace, settings: ResolverSettings, credentials: ProviderCredentials) -> int:
    coordinates = validate_coordinates(args.lat, args.lon)
    if coordinates is None:
        _print_json({"error": "Invalid coordinates provided"})
        return 2
    async with open_resolver(settings=settings, credentials=credentials) as resolver:
        text = await resolver.reverse_to_text(coordinates)
    _print_json({"coordinates": {"latitude": coordinates.latitude, "longitude": coordinates.longitude}, "text": text})
    return 0


def cmd_distance(args: argparse.Namespace) -> int:
    meters = haversine_distance_meters(args.lat1, args.lon1, args.lat2, args.lon2)
    _print_json({"meters": round(meters, 2)})
    return 0


def cmd_gazetteer(settings: ResolverSettings) -> int:
    gazetteer = GazetteerFallback(confidence=settings.confidence)
    _print_json(
        [
            {
                "match": entry.match_substring,
                "latitude": entry.latitude,
                "longitude": entry.longitude,
                "displayName": entry.display_name,
                "granularity": entry.granularity.value,
            }
            for entry in gazetteer.entries
        ]
    )
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    settings = load_settings(Path(args.settings))
    configure_logging(DEFAULT_LOGGING_CONFIG)
    credentials = ProviderCredentials.from_env()

    if args.command == "resolve":
        code = asyncio.run(run_resolve(args, settings, credentials))
    elif args.command == "reverse":
        code = asyncio.run(run_reverse(args, settings, credentials))
    elif args.command == "distance":
        code = cmd_distance(args)
    else:
        code = cmd_gazetteer(settings)

    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
