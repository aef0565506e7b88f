"""
Landmark summary formatter.

Renders a filtered landmark map as a plain-text list or as JSON.
"""
from __future__ import annotations

import json
from typing import Mapping, Optional

from app.models import FeatureKind, LandmarkEntry

EMPTY_MESSAGE = "No notable landmarks found."

_TYPE_LABELS = {
    FeatureKind.PASS: "Pass",
    FeatureKind.RIVER: "River",
    FeatureKind.TOWN: "Town",
}


class LandmarkSummaryFormatter:
    """Formats landmark results for console/file output."""

    def format_text(
        self,
        landmarks: Mapping[int, LandmarkEntry],
        track_name: Optional[str] = None,
        total_km: Optional[float] = None,
    ) -> str:
        """One line per landmark, ascending by km."""
        lines: list[str] = []
        if track_name:
            header = track_name
            if total_km is not None:
                header += f" ({total_km:.1f} km)"
            lines.append(header)
            lines.append("")

        if not landmarks:
            lines.append(EMPTY_MESSAGE)
            return "\n".join(lines)

        width = len(str(max(landmarks)))
        for km in sorted(landmarks):
            entry = landmarks[km]
            label = _TYPE_LABELS[entry.type]
            lines.append(f"km {km:>{width}}  {label:<5}  {entry.name}")
        return "\n".join(lines)

    def format_json(self, landmarks: Mapping[int, LandmarkEntry]) -> str:
        """JSON object keyed by km (as string, JSON keys are strings)."""
        payload = {str(km): landmarks[km].to_dict() for km in sorted(landmarks)}
        return json.dumps(payload, indent=2, ensure_ascii=False)
