"""
GPX Parser & Validation.

Parses GPX files (GPX 1.0/1.1) using gpxpy library.
Extracts track points with coordinates and elevation in recording order.
Points without <ele> get elevation 0.0.
"""
from __future__ import annotations

from pathlib import Path

import gpxpy
import gpxpy.gpx

from app.models import GPXTrack, TrackPoint


class GPXParseError(ValueError):
    """Raised when GPX file is invalid or cannot be parsed."""


def parse_gpx(file_path: str | Path) -> GPXTrack:
    """Parse GPX file and return its track points.

    Args:
        file_path: Path to .gpx file.

    Returns:
        GPXTrack with all track points of all tracks and segments.

    Raises:
        GPXParseError: On unreadable file, invalid format, no points
            or invalid coordinates.
    """
    file_path = Path(file_path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise GPXParseError(f"File not readable: {file_path} ({e})")

    if not content.strip():
        raise GPXParseError(f"File is empty: {file_path}")

    return parse_gpx_text(content)


def parse_gpx_text(content: str) -> GPXTrack:
    """Parse GPX document from a string (e.g. an upload)."""
    gpx = _parse_content(content)

    points = _extract_points(gpx)
    _validate_points(points)

    return GPXTrack(name=_extract_name(gpx), points=points)


def _parse_content(content: str) -> gpxpy.gpx.GPX:
    """Parse GPX with gpxpy. Raises GPXParseError on failure."""
    if not content.strip():
        raise GPXParseError("GPX document is empty")
    try:
        return gpxpy.parse(content)
    except Exception as e:
        raise GPXParseError(f"Invalid GPX format: {e}")


def _extract_name(gpx: gpxpy.gpx.GPX) -> str:
    """Extract track name from first track or metadata."""
    if gpx.tracks and gpx.tracks[0].name:
        return gpx.tracks[0].name
    if gpx.name:
        return gpx.name
    if gpx.routes and gpx.routes[0].name:
        return gpx.routes[0].name
    return "Unnamed Track"


def _extract_points(gpx: gpxpy.gpx.GPX) -> list[TrackPoint]:
    """Extract all track points; falls back to route points."""
    points: list[TrackPoint] = []

    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                points.append(_to_track_point(pt))

    if not points:
        for route in gpx.routes:
            for pt in route.points:
                points.append(_to_track_point(pt))

    return points


def _to_track_point(pt) -> TrackPoint:
    return TrackPoint(
        lat=pt.latitude,
        lon=pt.longitude,
        elevation_m=pt.elevation if pt.elevation is not None else 0.0,
    )


def _validate_points(points: list[TrackPoint]) -> None:
    """Validate extracted track points."""
    if not points:
        raise GPXParseError("No track points found in GPX")

    for i, pt in enumerate(points):
        if not (-90 <= pt.lat <= 90):
            raise GPXParseError(f"Invalid latitude at point {i}: {pt.lat}")
        if not (-180 <= pt.lon <= 180):
            raise GPXParseError(f"Invalid longitude at point {i}: {pt.lon}")
