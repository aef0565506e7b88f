"""
Marker classification.

Labels each distance marker with the nearest pass, river or town
(first match wins, in that order). A town reached at a local
elevation peak is reported as a pass.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence, Tuple

from app.models import (
    UNNAMED_PASS,
    UNNAMED_RIVER,
    UNNAMED_TOWN,
    UNNAMED_TOWN_PEAK,
    ClassifiedMap,
    DistanceMarker,
    Feature,
    FeatureKind,
    LandmarkConfig,
    LandmarkEntry,
    TrackPoint,
)
from core.feature_store import FeatureSet
from core.geo import haversine_km

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def is_peak(points: Sequence[TrackPoint], index: int, window: int = 2) -> bool:
    """Local elevation maximum test.

    A point is a peak if no point within ``window`` positions on either
    side (clipped at the track ends) is strictly higher.
    """
    elevation = points[index].elevation_m
    for offset in range(1, window + 1):
        left = index - offset
        right = index + offset
        if left >= 0 and points[left].elevation_m > elevation:
            return False
        if right < len(points) and points[right].elevation_m > elevation:
            return False
    return True


def nearest_feature(
    lat: float,
    lon: float,
    features: Iterable[Feature],
    max_distance_km: float,
) -> Optional[Tuple[Feature, float]]:
    """Nearest feature strictly closer than ``max_distance_km``.

    Ties keep the feature encountered first.
    """
    best: Optional[Feature] = None
    best_dist = max_distance_km
    for feature in features:
        position = feature.position
        if position is None:
            continue
        dist = haversine_km(lat, lon, position[0], position[1])
        if dist < best_dist:
            best = feature
            best_dist = dist
    if best is None:
        return None
    return best, best_dist


def classify_marker(
    marker: DistanceMarker,
    points: Sequence[TrackPoint],
    features: FeatureSet,
    config: Optional[LandmarkConfig] = None,
) -> Optional[LandmarkEntry]:
    """Determine the landmark for one marker, or None if nothing is near."""
    config = config or LandmarkConfig()
    point = points[marker.point_index]

    match = nearest_feature(point.lat, point.lon, features.passes, config.proximity_km)
    if match:
        feature = match[0]
        return LandmarkEntry(marker.km, FeatureKind.PASS, feature.name or UNNAMED_PASS, feature)

    match = nearest_feature(point.lat, point.lon, features.rivers, config.proximity_km)
    if match:
        feature = match[0]
        return LandmarkEntry(marker.km, FeatureKind.RIVER, feature.name or UNNAMED_RIVER, feature)

    match = nearest_feature(point.lat, point.lon, features.towns, config.proximity_km)
    if match:
        feature = match[0]
        if is_peak(points, marker.point_index, config.peak_window):
            return LandmarkEntry(marker.km, FeatureKind.PASS, feature.name or UNNAMED_TOWN_PEAK, feature)
        return LandmarkEntry(marker.km, FeatureKind.TOWN, feature.name or UNNAMED_TOWN, feature)

    return None


def classify_markers(
    markers: Sequence[DistanceMarker],
    points: Sequence[TrackPoint],
    features: FeatureSet,
    config: Optional[LandmarkConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ClassifiedMap:
    """Classify all markers in order.

    Progress is reported as (processed, total) after every marker,
    matched or not.
    """
    classified: ClassifiedMap = {}
    total = len(markers)

    for i, marker in enumerate(markers, start=1):
        entry = classify_marker(marker, points, features, config)
        if entry is not None:
            classified[marker.km] = entry
            logger.debug("km %d: %s '%s'", marker.km, entry.type.value, entry.name)
        if on_progress is not None:
            on_progress(i, total)

    return classified
