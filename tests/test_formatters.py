"""Tests for landmark formatters."""
import json

from app.models import FeatureKind, LandmarkEntry
from formatters.landmark_summary import EMPTY_MESSAGE, LandmarkSummaryFormatter

RESULT = {
    22: LandmarkEntry(22, FeatureKind.TOWN, "Bigtown"),
    8: LandmarkEntry(8, FeatureKind.PASS, "Example Pass"),
}


class TestFormatText:

    def test_lines_sorted_by_km(self):
        text = LandmarkSummaryFormatter().format_text(RESULT)
        lines = text.splitlines()
        assert lines[0].startswith("km  8")
        assert "Pass" in lines[0] and "Example Pass" in lines[0]
        assert lines[1].startswith("km 22")
        assert "Bigtown" in lines[1]

    def test_header_with_distance(self):
        text = LandmarkSummaryFormatter().format_text(RESULT, track_name="Alpine Loop", total_km=25.04)
        assert text.splitlines()[0] == "Alpine Loop (25.0 km)"

    def test_empty_result(self):
        assert LandmarkSummaryFormatter().format_text({}) == EMPTY_MESSAGE


class TestFormatJson:

    def test_json_keys_are_km(self):
        payload = json.loads(LandmarkSummaryFormatter().format_json(RESULT))
        assert payload == {
            "8": {"type": "pass", "name": "Example Pass"},
            "22": {"type": "town", "name": "Bigtown"},
        }
        assert list(payload) == ["8", "22"]

    def test_non_ascii_names_kept(self):
        result = {3: LandmarkEntry(3, FeatureKind.TOWN, "Wörgl")}
        assert "Wörgl" in LandmarkSummaryFormatter().format_json(result)
