# ensures the 'src' directory is on sys.path for imports like 'from app import ...'
import math
import sys
from pathlib import Path

import pytest

root = Path(__file__).resolve().parents[1]
src = root / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from app.models import Feature, FeatureKind, TrackPoint  # noqa: E402

# km per degree of latitude (and of longitude at the equator), R = 6371 km
KM_PER_DEG = 6371.0 * math.pi / 180.0


@pytest.fixture
def make_track():
    """Factory: straight northbound track along the equator meridian.

    Point i sits ``distances_km[i]`` km north of (0, 0).
    """
    def _make(distances_km, elevations=None):
        if elevations is None:
            elevations = [100.0] * len(distances_km)
        return [
            TrackPoint(lat=d / KM_PER_DEG, lon=0.0, elevation_m=float(e))
            for d, e in zip(distances_km, elevations)
        ]
    return _make


@pytest.fixture
def make_feature():
    """Factory: feature ``km`` north of the origin, ``east_km`` off the track."""
    def _make(kind, km, name=None, east_km=0.3, population=None, as_center=False):
        lat = km / KM_PER_DEG
        lon = east_km / KM_PER_DEG
        if as_center:
            return Feature(kind=kind, name=name, center_lat=lat, center_lon=lon, population=population)
        return Feature(kind=kind, name=name, lat=lat, lon=lon, population=population)
    return _make


@pytest.fixture
def scenario_track(make_track):
    """20 points over ~25 km, markers at km 0-12, 14, 16, ..., 24, 25.

    Elevation rises monotonically, so only the last point is a peak.
    """
    distances = [0.0] + [k + 0.01 for k in range(1, 13)] + [14.01, 16.01, 18.01, 20.01, 22.01, 24.01, 25.01]
    elevations = [100 + 10 * i for i in range(len(distances))]
    return make_track(distances, elevations)


@pytest.fixture
def scenario_features(make_feature):
    """Pass at km 8, unnamed river at km 9, Bigtown (12,000) at km 22."""
    return [
        make_feature(FeatureKind.PASS, 8.01, name="Example Pass"),
        make_feature(FeatureKind.RIVER, 9.01, as_center=True),
        make_feature(FeatureKind.TOWN, 22.01, name="Bigtown", population="12,000"),
    ]
