"""
CLI entry point for Route Landmarks.

Thin layer that wires together configuration, services, and outputs.
Business logic lives in services, this module only handles:
- Argument parsing
- Dependency wiring
- Exit codes
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.config import Settings
from app.debug import DebugBuffer
from core.distance_sampler import InsufficientInputError, total_distance_km
from core.gpx_parser import GPXParseError, parse_gpx
from formatters.landmark_summary import LandmarkSummaryFormatter
from outputs.base import OutputError, get_channel
from providers.base import ProviderError, available_providers, get_feature_store
from services.route_annotation import RouteAnnotationService


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all CLI options."""
    parser = argparse.ArgumentParser(
        prog="route-landmarks",
        description="Annotate a GPX track with passes, rivers and towns along the route",
    )
    parser.add_argument(
        "gpx",
        metavar="FILE",
        help="GPX file with the recorded or planned track",
    )
    parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="Feature store (default: from settings/env)",
    )
    parser.add_argument(
        "--features",
        metavar="JSON",
        help="Overpass JSON dump for the 'file' provider (implies --provider file)",
    )
    parser.add_argument(
        "--overpass-url",
        help="Overpass interpreter URL",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Feature lookup timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        help="Output format",
    )
    parser.add_argument(
        "--channel",
        choices=["console", "none"],
        help="Output channel",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show classification progress on stderr",
    )
    parser.add_argument(
        "--debug",
        choices=["info", "verbose"],
        help="Debug output level",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Build settings with CLI overrides."""
    overrides = {}
    if args.features is not None:
        overrides["features_file"] = args.features
        overrides["provider"] = "file"
    if args.provider is not None:
        overrides["provider"] = args.provider
    if args.overpass_url is not None:
        overrides["overpass_url"] = args.overpass_url
    if args.timeout is not None:
        overrides["lookup_timeout_s"] = args.timeout
    if args.format is not None:
        overrides["output_format"] = args.format
    if args.channel is not None:
        overrides["channel"] = args.channel
    if args.debug is not None:
        overrides["debug_level"] = args.debug
    return Settings(**overrides)


def _print_progress(processed: int, total: int) -> None:
    end = "\n" if processed == total else ""
    print(f"\rClassifying markers: {processed}/{total}", end=end, file=sys.stderr, flush=True)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = _settings_from_args(args)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug_level == "verbose" else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    debug = DebugBuffer()

    debug.add(f"settings.provider: {settings.provider}")
    debug.add(f"settings.channel: {settings.channel}")
    debug.add(f"settings.lookup_timeout_s: {settings.lookup_timeout_s}")

    try:
        return _run_annotation(args, settings, debug)
    except GPXParseError as e:
        print(f"GPX error: {e}", file=sys.stderr)
        return 1
    except InsufficientInputError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1
    except ProviderError as e:
        print(f"Provider error: {e}", file=sys.stderr)
        return 1
    except OutputError as e:
        print(f"Output error: {e}", file=sys.stderr)
        return 1


def _run_annotation(args, settings: Settings, debug: DebugBuffer) -> int:
    """Load the track, annotate it and send the report."""
    track = parse_gpx(args.gpx)
    debug.add(f"track: {track.name}")

    store = get_feature_store(settings.provider, settings)
    service = RouteAnnotationService(
        store,
        config=settings.get_landmark_config(),
        lookup_timeout_s=settings.lookup_timeout_s,
        debug=debug,
    )

    on_progress = _print_progress if args.progress else None
    landmarks = asyncio.run(service.annotate(track.points, on_progress=on_progress))

    formatter = LandmarkSummaryFormatter()
    if settings.output_format == "json":
        body = formatter.format_json(landmarks)
    else:
        body = formatter.format_text(
            landmarks,
            track_name=track.name,
            total_km=total_distance_km(track.points),
        )
    if settings.debug_level == "verbose" and settings.output_format != "json":
        body += "\n\n[Debug Info]\n" + debug.as_text()

    channel = get_channel(settings.channel, settings)
    channel.send(f"Landmarks - {track.name}", body)
    return 0


if __name__ == "__main__":
    sys.exit(main())
