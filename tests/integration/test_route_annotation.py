"""
Integration tests for the route annotation pipeline.

GIVEN a synthetic track and a stub feature store
WHEN annotating through RouteAnnotationService
THEN the sparse landmark map and callbacks behave as documented.
"""
import asyncio

import pytest

from app.debug import DebugBuffer
from app.models import FeatureKind, LandmarkEntry
from core.distance_sampler import InsufficientInputError, sample_markers
from core.feature_store import features_from_elements
from providers.base import FeatureStore, ProviderRequestError
from providers.static import StaticFeatureStore
from services.route_annotation import RouteAnnotationService, annotate_route

EXPECTED = {
    8: LandmarkEntry(8, FeatureKind.PASS, "Example Pass"),
    22: LandmarkEntry(22, FeatureKind.TOWN, "Bigtown"),
}


class RecordingStore:
    """Returns fixed features and records the requested bounding boxes."""

    name = "stub"

    def __init__(self, features):
        self._features = list(features)
        self.requests = []

    async def lookup(self, bbox):
        self.requests.append(bbox)
        return list(self._features)


class FailingStore:
    name = "failing"

    async def lookup(self, bbox):
        raise ProviderRequestError("failing", "HTTP 503")


class ExplodingStore:
    name = "exploding"

    async def lookup(self, bbox):
        raise RuntimeError("socket died")


class MalformedStore:
    name = "malformed"

    async def lookup(self, bbox):
        return None


class SlowStore:
    name = "slow"

    async def lookup(self, bbox):
        await asyncio.sleep(5)
        return []


def _annotate(service, points, **kwargs):
    return asyncio.run(service.annotate(points, **kwargs))


class TestAnnotateScenario:

    def test_expected_landmarks(self, scenario_track, scenario_features):
        service = RouteAnnotationService(RecordingStore(scenario_features))
        assert _annotate(service, scenario_track) == EXPECTED

    def test_single_lookup_with_marker_bbox(self, scenario_track, scenario_features):
        store = RecordingStore(scenario_features)
        _annotate(RouteAnnotationService(store), scenario_track)
        assert len(store.requests) == 1
        bbox = store.requests[0]
        first, last = scenario_track[0], scenario_track[-1]
        assert bbox.min_lat == pytest.approx(first.lat - 0.01)
        assert bbox.max_lat == pytest.approx(last.lat + 0.01)
        assert bbox.min_lon == pytest.approx(-0.01)
        assert bbox.max_lon == pytest.approx(0.01)

    def test_idempotent(self, scenario_track, scenario_features):
        service = RouteAnnotationService(RecordingStore(scenario_features))
        first = _annotate(service, scenario_track)
        second = _annotate(service, scenario_track)
        assert first == second

    def test_static_store(self, scenario_track, scenario_features):
        service = RouteAnnotationService(StaticFeatureStore(scenario_features))
        assert _annotate(service, scenario_track) == EXPECTED

    def test_stub_satisfies_protocol(self, scenario_features):
        assert isinstance(RecordingStore(scenario_features), FeatureStore)

    def test_debug_buffer_filled(self, scenario_track, scenario_features):
        debug = DebugBuffer()
        service = RouteAnnotationService(RecordingStore(scenario_features), debug=debug)
        _annotate(service, scenario_track)
        text = debug.as_text()
        assert "provider: stub" in text
        assert "landmarks: 2" in text
        assert service.provider_name == "stub"


class TestCallbacks:

    def test_progress_from_one_to_total(self, scenario_track, scenario_features):
        calls = []
        service = RouteAnnotationService(RecordingStore(scenario_features))
        _annotate(service, scenario_track, on_progress=lambda done, total: calls.append((done, total)))
        total = len(sample_markers(scenario_track))
        assert calls == [(i, total) for i in range(1, total + 1)]

    def test_completion_called_once_with_result(self, scenario_track, scenario_features):
        results = []
        service = RouteAnnotationService(RecordingStore(scenario_features))
        returned = _annotate(service, scenario_track, on_complete=results.append)
        assert len(results) == 1
        assert results[0] == returned == EXPECTED

    def test_completion_after_last_progress(self, scenario_track, scenario_features):
        events = []
        service = RouteAnnotationService(RecordingStore(scenario_features))
        _annotate(
            service, scenario_track,
            on_progress=lambda done, total: events.append("progress"),
            on_complete=lambda result: events.append("complete"),
        )
        assert events[-1] == "complete"
        assert events.count("complete") == 1


class TestLookupFailures:
    """Lookup failures degrade to an empty result, never an exception."""

    def test_provider_error_gives_empty_result(self, scenario_track):
        results = []
        service = RouteAnnotationService(FailingStore())
        assert _annotate(service, scenario_track, on_complete=results.append) == {}
        assert results == [{}]

    def test_failure_still_reports_progress(self, scenario_track):
        calls = []
        service = RouteAnnotationService(FailingStore())
        _annotate(service, scenario_track, on_progress=lambda done, total: calls.append(done))
        assert calls[-1] == len(sample_markers(scenario_track))

    def test_timeout_gives_empty_result(self, scenario_track):
        debug = DebugBuffer()
        service = RouteAnnotationService(SlowStore(), lookup_timeout_s=0.05, debug=debug)
        assert _annotate(service, scenario_track) == {}
        assert "lookup: timeout" in debug.as_text()

    def test_unexpected_exception_gives_empty_result(self, scenario_track):
        results = []
        debug = DebugBuffer()
        service = RouteAnnotationService(ExplodingStore(), debug=debug)
        assert _annotate(service, scenario_track, on_complete=results.append) == {}
        assert results == [{}]
        assert "RuntimeError" in debug.as_text()

    def test_malformed_payload_gives_empty_result(self, scenario_track):
        results = []
        service = RouteAnnotationService(MalformedStore())
        assert _annotate(service, scenario_track, on_complete=results.append) == {}
        assert results == [{}]

    def test_non_string_name_in_dump(self, scenario_track):
        elements = [{
            "type": "node",
            "lat": scenario_track[8].lat,
            "lon": 0.002,
            "tags": {"mountain_pass": "yes", "name": 42},
        }]
        store = StaticFeatureStore(features_from_elements(elements))
        result = _annotate(RouteAnnotationService(store), scenario_track)
        assert result == {8: LandmarkEntry(8, FeatureKind.PASS, "42")}

    def test_no_features_nearby(self, scenario_track, make_feature):
        far = make_feature(FeatureKind.TOWN, 5.0, name="Faraway", east_km=20.0)
        service = RouteAnnotationService(RecordingStore([far]))
        assert _annotate(service, scenario_track) == {}


class TestInputValidation:

    def test_insufficient_points_raises_before_lookup(self, make_track):
        store = RecordingStore([])
        service = RouteAnnotationService(store)
        with pytest.raises(InsufficientInputError):
            _annotate(service, make_track([0.0]))
        assert store.requests == []

    def test_short_track_single_marker(self, make_track, make_feature):
        """Track under 1 km: only the origin marker is classified."""
        points = make_track([0.0, 0.4, 0.8], [500, 400, 300])
        pass_feature = make_feature(FeatureKind.PASS, 0.0, name="Startpass")
        calls = []
        service = RouteAnnotationService(RecordingStore([pass_feature]))
        result = _annotate(service, points, on_progress=lambda done, total: calls.append((done, total)))
        assert result == {0: LandmarkEntry(0, FeatureKind.PASS, "Startpass")}
        assert calls == [(1, 1)]


class TestPrecedence:

    def test_pass_beats_river_at_same_marker(self, make_track, make_feature):
        points = make_track([0.0] + [k + 0.01 for k in range(1, 8)])
        features = [
            make_feature(FeatureKind.RIVER, 3.01, name="Sill", east_km=0.1),
            make_feature(FeatureKind.PASS, 3.01, name="Brenner", east_km=0.5),
        ]
        result = _annotate(RouteAnnotationService(RecordingStore(features)), points)
        assert result == {3: LandmarkEntry(3, FeatureKind.PASS, "Brenner")}

    def test_town_on_summit_reported_as_pass(self, make_track, make_feature):
        distances = [0.0] + [k + 0.01 for k in range(1, 8)]
        elevations = [1000, 1200, 1400, 1600, 1400, 1200, 1000, 900]
        features = [make_feature(FeatureKind.TOWN, 3.01, name="Sestriere", population="900")]
        result = _annotate(
            RouteAnnotationService(RecordingStore(features)),
            make_track(distances, elevations),
        )
        assert result == {3: LandmarkEntry(3, FeatureKind.PASS, "Sestriere")}


class TestAnnotateRoute:
    """Blocking wrapper."""

    def test_returns_result(self, scenario_track, scenario_features):
        assert annotate_route(scenario_track, RecordingStore(scenario_features)) == EXPECTED

    def test_forwards_callbacks(self, scenario_track, scenario_features):
        done = []
        annotate_route(
            scenario_track,
            RecordingStore(scenario_features),
            on_complete=done.append,
        )
        assert done == [EXPECTED]
