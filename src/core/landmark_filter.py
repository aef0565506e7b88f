"""
Landmark filtering & deduplication.

Reduces all classified markers to a sparse list: at most one landmark
per 10 km block, precedence pass > river > town, placeholder names
dropped, repeated (type, name) pairs dropped, and the earlier of two
landmarks closer than 5 km removed.

Each selection step takes the previous FilterState and returns a new
one, so the steps can be run and tested in isolation.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Sequence, Tuple

from app.models import (
    ClassifiedMap,
    DistanceMarker,
    FeatureKind,
    FilteredResult,
    LandmarkConfig,
    LandmarkEntry,
)


@dataclass(frozen=True)
class FilterState:
    """Accepted entries plus the bookkeeping threaded between steps."""
    accepted: Mapping[int, LandmarkEntry] = field(default_factory=lambda: MappingProxyType({}))
    claimed_blocks: FrozenSet[int] = frozenset()
    seen: FrozenSet[Tuple[FeatureKind, str]] = frozenset()

    def accept(self, entry: LandmarkEntry, block: int) -> "FilterState":
        accepted = dict(self.accepted)
        accepted[entry.km] = entry
        return replace(
            self,
            accepted=MappingProxyType(accepted),
            claimed_blocks=self.claimed_blocks | {block},
            seen=self.seen | {entry.dedup_key},
        )

    def claim(self, block: int) -> "FilterState":
        return replace(self, claimed_blocks=self.claimed_blocks | {block})


def block_of(km: int, block_km: int = 10) -> int:
    """Index of the deduplication block containing ``km``."""
    return km // block_km


def _candidates(
    classified: ClassifiedMap,
    markers: Sequence[DistanceMarker],
    kind: FeatureKind,
):
    """Named entries of one kind, in ascending marker order."""
    for marker in markers:
        entry = classified.get(marker.km)
        if entry is None or entry.type != kind or entry.is_placeholder:
            continue
        yield entry


def select_passes(
    classified: ClassifiedMap,
    markers: Sequence[DistanceMarker],
    state: FilterState,
    block_km: int = 10,
) -> FilterState:
    """First named pass per unclaimed block."""
    for entry in _candidates(classified, markers, FeatureKind.PASS):
        block = block_of(entry.km, block_km)
        if block in state.claimed_blocks:
            continue
        state = state.accept(entry, block)
    return state


def select_rivers(
    classified: ClassifiedMap,
    markers: Sequence[DistanceMarker],
    state: FilterState,
    block_km: int = 10,
) -> FilterState:
    """First named river per unclaimed block, unless already reported."""
    for entry in _candidates(classified, markers, FeatureKind.RIVER):
        block = block_of(entry.km, block_km)
        if block in state.claimed_blocks:
            continue
        if entry.dedup_key in state.seen:
            continue
        state = state.accept(entry, block)
    return state


def _population(entry: LandmarkEntry) -> int:
    return entry.feature.population_value if entry.feature is not None else 0


def select_towns(
    classified: ClassifiedMap,
    markers: Sequence[DistanceMarker],
    state: FilterState,
    block_km: int = 10,
) -> FilterState:
    """Most populous named town per unclaimed block.

    Ties keep the earlier marker. A block whose winner was already
    reported is still claimed.
    """
    best_per_block: Dict[int, LandmarkEntry] = {}
    for entry in _candidates(classified, markers, FeatureKind.TOWN):
        block = block_of(entry.km, block_km)
        if block in state.claimed_blocks:
            continue
        current = best_per_block.get(block)
        if current is None or _population(entry) > _population(current):
            best_per_block[block] = entry

    for block in sorted(best_per_block):
        entry = best_per_block[block]
        if entry.dedup_key in state.seen:
            state = state.claim(block)
        else:
            state = state.accept(entry, block)
    return state


def collapse_close_entries(
    entries: Mapping[int, LandmarkEntry],
    min_gap_km: int = 5,
) -> FilteredResult:
    """Drop the earlier of each adjacent pair closer than ``min_gap_km``.

    Single pass over the original neighbors; removals are not
    re-checked against the entry before the removed one.
    """
    kms = sorted(entries)
    to_remove = {
        kms[i - 1]
        for i in range(1, len(kms))
        if kms[i] - kms[i - 1] < min_gap_km
    }
    return {km: entries[km] for km in kms if km not in to_remove}


def filter_landmarks(
    classified: ClassifiedMap,
    markers: Sequence[DistanceMarker],
    config: Optional[LandmarkConfig] = None,
) -> FilteredResult:
    """Run the full filter pipeline on a classified marker map.

    Args:
        classified: km -> entry for every matched marker.
        markers: All markers in ascending km order.
        config: Block size and minimum gap.

    Returns:
        Sparse km -> entry map, sorted by km.
    """
    config = config or LandmarkConfig()
    state = FilterState()
    state = select_passes(classified, markers, state, config.block_km)
    state = select_rivers(classified, markers, state, config.block_km)
    state = select_towns(classified, markers, state, config.block_km)
    return collapse_close_entries(state.accepted, config.min_gap_km)
