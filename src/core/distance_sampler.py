"""
Distance sampling.

Walks the track once and emits a marker every ~1 km of cumulative
haversine distance. Each marker refers to the track point at which
the threshold was crossed.
"""
from __future__ import annotations

import math
from typing import Sequence

from app.models import DistanceMarker, TrackPoint
from core.geo import haversine_km

MIN_TRACK_POINTS = 2


class InsufficientInputError(ValueError):
    """Raised when a track has too few points to be annotated."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sample_markers(
    points: Sequence[TrackPoint],
    every_km: float = 1.0,
) -> list[DistanceMarker]:
    """Resample a track into distance markers.

    Greedy single forward pass: whenever the cumulative distance reaches
    the last marker's (rounded) km plus ``every_km``, a marker is emitted
    at the current point. Skipped points are never revisited.

    Args:
        points: Track points in recording order.
        every_km: Sampling interval in km.

    Returns:
        Markers, always starting with DistanceMarker(km=0, point_index=0).

    Raises:
        InsufficientInputError: If fewer than 2 points are given.
    """
    if len(points) < MIN_TRACK_POINTS:
        raise InsufficientInputError(
            f"Too few track points: {len(points)} (minimum: {MIN_TRACK_POINTS})"
        )

    markers = [DistanceMarker(km=0, point_index=0)]
    cumulative_km = 0.0

    for i in range(1, len(points)):
        prev = points[i - 1]
        curr = points[i]
        cumulative_km += haversine_km(prev.lat, prev.lon, curr.lat, curr.lon)
        if cumulative_km >= markers[-1].km + every_km:
            markers.append(DistanceMarker(km=_round_half_up(cumulative_km), point_index=i))

    return markers


def total_distance_km(points: Sequence[TrackPoint]) -> float:
    """Total haversine length of the track in km."""
    return sum(
        haversine_km(a.lat, a.lon, b.lat, b.lon)
        for a, b in zip(points, points[1:])
    )
