"""
Data Transfer Objects (DTOs) for Route Landmarks.

Defines the data structures shared by the GPX loader, the feature
providers and the landmark annotation pipeline.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class FeatureKind(str, Enum):
    """Kinds of geodata features used as landmark targets."""
    PASS = "pass"
    RIVER = "river"
    TOWN = "town"


# Placeholder names for features without a name tag
UNNAMED_PASS = "Unnamed Pass"
UNNAMED_RIVER = "Unnamed River"
UNNAMED_TOWN = "Unnamed Town"
UNNAMED_TOWN_PEAK = "Unnamed Town (Peak)"

PLACEHOLDER_MARKER = "unnamed"

_NON_DIGITS = re.compile(r"\D")


def is_placeholder_name(name: str) -> bool:
    """True if the name is (or contains) an "Unnamed ..." placeholder."""
    return PLACEHOLDER_MARKER in name.lower()


@dataclass(frozen=True)
class TrackPoint:
    """Single recorded point of a GPS track."""
    lat: float
    lon: float
    elevation_m: float = 0.0


@dataclass
class GPXTrack:
    """Parsed GPX track (points in recording order)."""
    name: str
    points: List[TrackPoint] = field(default_factory=list)


@dataclass(frozen=True)
class DistanceMarker:
    """Sampled position along the route, the unit of classification."""
    km: int
    point_index: int


@dataclass(frozen=True)
class Feature:
    """
    External geodata record (pass, river or town).

    Way-type features (rivers) usually carry only a center point;
    nodes carry lat/lon directly.
    """
    kind: FeatureKind
    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    center_lat: Optional[float] = None
    center_lon: Optional[float] = None
    population: Optional[str] = None  # raw tag, e.g. "12,000"

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        """Representative point, or None if the feature has no usable position."""
        if self.lat is not None and self.lon is not None:
            return self.lat, self.lon
        if self.center_lat is not None and self.center_lon is not None:
            return self.center_lat, self.center_lon
        return None

    @property
    def population_value(self) -> int:
        """Population as integer (non-digits stripped, 0 if absent/unparseable)."""
        if not self.population:
            return 0
        digits = _NON_DIGITS.sub("", self.population)
        return int(digits) if digits else 0


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box in degrees."""
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def expanded(self, margin_deg: float) -> "BoundingBox":
        return BoundingBox(
            min_lat=self.min_lat - margin_deg,
            min_lon=self.min_lon - margin_deg,
            max_lat=self.max_lat + margin_deg,
            max_lon=self.max_lon + margin_deg,
        )

    def contains(self, lat: float, lon: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lon <= lon <= self.max_lon
        )

    def as_overpass(self) -> str:
        """Overpass QL bbox filter: south,west,north,east."""
        return f"{self.min_lat},{self.min_lon},{self.max_lat},{self.max_lon}"


@dataclass(frozen=True)
class LandmarkEntry:
    """Landmark reported at a marker (km) along the route."""
    km: int
    type: FeatureKind
    name: str
    # Matched feature, needed for the town population ranking
    feature: Optional[Feature] = field(default=None, compare=False, repr=False)

    @property
    def is_placeholder(self) -> bool:
        return is_placeholder_name(self.name)

    @property
    def dedup_key(self) -> Tuple[FeatureKind, str]:
        return self.type, self.name

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "name": self.name}


@dataclass
class LandmarkConfig:
    """Tunable constants of the landmark annotation pipeline."""
    sample_every_km: float = 1.0  # Distance between markers
    proximity_km: float = 1.0     # Max marker-to-feature distance
    peak_window: int = 2          # Neighbors checked on each side
    block_km: int = 10            # Deduplication block size
    min_gap_km: int = 5           # Min distance between reported landmarks
    bbox_margin_deg: float = 0.01


# Type aliases for the pipeline maps (km -> entry)
ClassifiedMap = Dict[int, LandmarkEntry]
FilteredResult = Dict[int, LandmarkEntry]
