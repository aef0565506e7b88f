"""
Static (offline) Feature Store.

Serves features from memory or from an Overpass JSON dump on disk,
e.g. saved with::

    curl -d @query.overpassql https://overpass-api.de/api/interpreter > features.json

Deterministic: the same bbox always yields the same features in the
same order.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from app.models import BoundingBox, Feature
from core.feature_store import features_from_elements
from providers.base import ProviderRequestError

logger = logging.getLogger("static_store")


class StaticFeatureStore:
    """Feature store backed by a fixed list of features."""

    def __init__(self, features: Iterable[Feature]) -> None:
        self._features = tuple(features)

    @classmethod
    def from_json(cls, path: str | Path) -> "StaticFeatureStore":
        """
        Load an Overpass-style JSON dump ({"elements": [...]}).

        Raises:
            ProviderRequestError: If the file is unreadable or malformed
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ProviderRequestError("file", f"Features file not readable: {path} ({e})") from e
        except json.JSONDecodeError as e:
            raise ProviderRequestError("file", f"Invalid JSON in {path}: {e}") from e

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise ProviderRequestError("file", f"Malformed features file {path}: no 'elements' list")

        features = features_from_elements(elements)
        logger.info("Loaded %d features from %s", len(features), path)
        return cls(features)

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "file"

    async def lookup(self, bbox: BoundingBox) -> List[Feature]:
        """Features positioned inside ``bbox``, in stored order."""
        return [
            f for f in self._features
            if f.position is not None and bbox.contains(*f.position)
        ]
