"""
Feature store helpers.

Turns tagged OSM elements (as returned by Overpass) into typed
features, groups them by kind and computes the lookup bounding box.
Encounter order of the source elements is preserved everywhere, since
nearest-feature ties are broken by it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from app.models import BoundingBox, DistanceMarker, Feature, FeatureKind, TrackPoint

TOWN_PLACES = frozenset({"town", "city", "village"})


def classify_tags(tags: Mapping[str, Any]) -> Optional[FeatureKind]:
    """Map an OSM tag set to a feature kind (pass > river > town)."""
    if tags.get("mountain_pass") == "yes":
        return FeatureKind.PASS
    if tags.get("waterway") == "river":
        return FeatureKind.RIVER
    if tags.get("place") in TOWN_PLACES:
        return FeatureKind.TOWN
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def feature_from_element(element: Mapping[str, Any]) -> Optional[Feature]:
    """Convert one Overpass element to a Feature.

    Returns None for elements without tags, with no matching kind or
    without a usable position (neither lat/lon nor a center point).
    """
    tags = element.get("tags")
    if not isinstance(tags, Mapping):
        return None

    kind = classify_tags(tags)
    if kind is None:
        return None

    center = element.get("center")
    if not isinstance(center, Mapping):
        center = {}

    name = tags.get("name")
    population = tags.get("population")
    feature = Feature(
        kind=kind,
        name=str(name) if name not in (None, "") else None,
        lat=_as_float(element.get("lat")),
        lon=_as_float(element.get("lon")),
        center_lat=_as_float(center.get("lat")),
        center_lon=_as_float(center.get("lon")),
        population=str(population) if population is not None else None,
    )
    if feature.position is None:
        return None
    return feature


def features_from_elements(elements: Iterable[Mapping[str, Any]]) -> list[Feature]:
    """Convert Overpass elements, skipping everything that is not a feature."""
    features = []
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        feature = feature_from_element(element)
        if feature is not None:
            features.append(feature)
    return features


@dataclass(frozen=True)
class FeatureSet:
    """Read-only snapshot of the features around one track."""
    passes: Tuple[Feature, ...] = ()
    rivers: Tuple[Feature, ...] = ()
    towns: Tuple[Feature, ...] = ()

    @classmethod
    def from_features(cls, features: Iterable[Feature]) -> "FeatureSet":
        by_kind: Dict[FeatureKind, list] = {kind: [] for kind in FeatureKind}
        for feature in features:
            by_kind[feature.kind].append(feature)
        return cls(
            passes=tuple(by_kind[FeatureKind.PASS]),
            rivers=tuple(by_kind[FeatureKind.RIVER]),
            towns=tuple(by_kind[FeatureKind.TOWN]),
        )

    @classmethod
    def empty(cls) -> "FeatureSet":
        return cls()

    def __len__(self) -> int:
        return len(self.passes) + len(self.rivers) + len(self.towns)


def marker_bounding_box(
    points: Sequence[TrackPoint],
    markers: Sequence[DistanceMarker],
    margin_deg: float = 0.01,
) -> BoundingBox:
    """Bounding box of all marker positions, expanded by ``margin_deg``."""
    lats = [points[m.point_index].lat for m in markers]
    lons = [points[m.point_index].lon for m in markers]
    return BoundingBox(
        min_lat=min(lats),
        min_lon=min(lons),
        max_lat=max(lats),
        max_lon=max(lons),
    ).expanded(margin_deg)
