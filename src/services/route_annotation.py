"""
Route annotation service - orchestrates the landmark pipeline.

Runs one track through sampling, a single feature lookup,
marker classification and filtering, and reports progress and the
final result through explicit callbacks.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from app.debug import DebugBuffer
from app.models import BoundingBox, FilteredResult, LandmarkConfig, TrackPoint
from core.distance_sampler import sample_markers
from core.feature_store import FeatureSet, marker_bounding_box
from core.landmark_filter import filter_landmarks
from core.marker_classifier import ProgressCallback, classify_markers
from providers.base import ProviderError

if TYPE_CHECKING:
    from providers.base import FeatureStore

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[FilteredResult], None]

DEFAULT_LOOKUP_TIMEOUT_S = 60.0


class RouteAnnotationService:
    """
    Service annotating GPS tracks with notable landmarks.

    Every call to annotate() works on its own markers, feature snapshot
    and result map; nothing is shared between calls.

    Example:
        >>> store = get_feature_store("overpass", settings)
        >>> service = RouteAnnotationService(store)
        >>> result = await service.annotate(track.points)
    """

    def __init__(
        self,
        store: "FeatureStore",
        config: Optional[LandmarkConfig] = None,
        lookup_timeout_s: float = DEFAULT_LOOKUP_TIMEOUT_S,
        debug: Optional[DebugBuffer] = None,
    ) -> None:
        """
        Initialize RouteAnnotationService with a feature store.

        Args:
            store: Geodata provider implementing FeatureStore protocol
            config: Pipeline constants (defaults: 1 km markers, 10 km blocks)
            lookup_timeout_s: Upper bound for the feature lookup
            debug: Optional debug buffer (creates one if not provided)
        """
        self._store = store
        self._config = config or LandmarkConfig()
        self._lookup_timeout_s = lookup_timeout_s
        self._debug = debug if debug is not None else DebugBuffer()

    @property
    def provider_name(self) -> str:
        """Name of the underlying feature store."""
        return self._store.name

    @property
    def debug(self) -> DebugBuffer:
        """Access to debug buffer for logging."""
        return self._debug

    async def annotate(
        self,
        points: Sequence[TrackPoint],
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> FilteredResult:
        """
        Annotate a complete track with landmarks.

        Args:
            points: Track points in recording order (at least 2)
            on_progress: Called with (processed, total) after each marker
            on_complete: Called once with the final result

        Returns:
            Sparse km -> LandmarkEntry map

        Raises:
            InsufficientInputError: If fewer than 2 points are given
        """
        markers = sample_markers(points, self._config.sample_every_km)
        self._debug.add(f"track.points: {len(points)}")
        self._debug.add(f"markers: {len(markers)} (last at km {markers[-1].km})")

        bbox = marker_bounding_box(points, markers, self._config.bbox_margin_deg)
        self._debug.add(f"bbox: {bbox.as_overpass()}")

        features = await self._lookup_features(bbox)
        self._debug.add(
            f"features: {len(features.passes)} passes, "
            f"{len(features.rivers)} rivers, {len(features.towns)} towns"
        )

        classified = classify_markers(markers, points, features, self._config, on_progress)
        self._debug.add(f"classified: {len(classified)}")

        result = filter_landmarks(classified, markers, self._config)
        self._debug.add(f"landmarks: {len(result)}")
        logger.info(
            "Annotated %d markers: %d classified, %d landmarks",
            len(markers), len(classified), len(result),
        )

        if on_complete is not None:
            on_complete(result)
        return result

    async def _lookup_features(self, bbox: BoundingBox) -> FeatureSet:
        """Single awaited lookup; failures and timeouts yield an empty set."""
        self._debug.add(f"provider: {self._store.name}")
        try:
            features = await asyncio.wait_for(
                self._store.lookup(bbox), timeout=self._lookup_timeout_s
            )
            feature_set = FeatureSet.from_features(features)
        except asyncio.TimeoutError:
            logger.warning(
                "Feature lookup (%s) timed out after %.1fs, continuing without features",
                self._store.name, self._lookup_timeout_s,
            )
            self._debug.add("lookup: timeout")
            return FeatureSet.empty()
        except ProviderError as e:
            logger.warning("Feature lookup failed, continuing without features: %s", e)
            self._debug.add(f"lookup: failed ({e})")
            return FeatureSet.empty()
        except Exception as e:
            # lookup failures of any kind are never fatal
            logger.warning(
                "Feature lookup (%s) raised %s, continuing without features: %s",
                self._store.name, type(e).__name__, e,
            )
            self._debug.add(f"lookup: failed ({type(e).__name__}: {e})")
            return FeatureSet.empty()

        return feature_set


def annotate_route(
    points: Sequence[TrackPoint],
    store: "FeatureStore",
    config: Optional[LandmarkConfig] = None,
    lookup_timeout_s: float = DEFAULT_LOOKUP_TIMEOUT_S,
    on_progress: Optional[ProgressCallback] = None,
    on_complete: Optional[CompletionCallback] = None,
) -> FilteredResult:
    """Blocking convenience wrapper around RouteAnnotationService.annotate()."""
    service = RouteAnnotationService(store, config, lookup_timeout_s)
    return asyncio.run(service.annotate(points, on_progress, on_complete))
