"""
Path to key-sequence mapping.

Each sample resolves to a key (inside-rectangle first, nearest centroid
otherwise). A hysteresis gate keeps the current key until another key wins
convincingly, and a post-pass removes short A-B-A bounces.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from src.config import MappingConfig
from .layout import Key, Layout, Point


@dataclass
class KeyTracker:
    """
    Hysteresis state for one gesture.

    Lives on the gesture session so nothing leaks between gestures.
    `visits` holds (key id, dwell) for every accepted key run, where dwell
    is the number of samples assigned to that key.
    """
    current_key: Optional[Key] = None
    candidate_key: Optional[Key] = None
    candidate_streak: int = 0
    visits: List[Tuple[str, int]] = field(default_factory=list)
    skipped: int = 0

    def reset(self):
        self.current_key = None
        self.candidate_key = None
        self.candidate_streak = 0
        self.visits.clear()
        self.skipped = 0


class KeySequenceMapper:
    """Maps layout-space path samples to a discrete key-id sequence."""

    def __init__(self, layout: Layout, config: Optional[MappingConfig] = None):
        self._layout = layout
        self._config = config or MappingConfig()

    @property
    def layout(self) -> Layout:
        return self._layout

    def update_layout(self, layout: Layout):
        self._layout = layout

    def feed(self, tracker: KeyTracker, point: Point) -> Optional[Key]:
        """
        Assign one sample, updating the tracker in place.

        Returns the current key after the sample, or None if nothing has
        been assigned yet. Samples beyond the noise cutoff from every
        centroid are skipped without touching the hysteresis state.
        """
        cfg = self._config
        cutoff = cfg.noise_cutoff if cfg.noise_cutoff > 0 else None
        best = self._layout.find_key(point, max_distance=cutoff)
        if best is None:
            tracker.skipped += 1
            return tracker.current_key

        current = tracker.current_key
        if current is None:
            self._switch(tracker, best)
            return best

        if best.id == current.id:
            # Current key won again; a pending switch must start over
            tracker.candidate_key = None
            tracker.candidate_streak = 0
            self._dwell(tracker)
            return current

        if self._should_switch(current, best, point):
            self._switch(tracker, best)
            return best

        if tracker.candidate_key is not None and tracker.candidate_key.id == best.id:
            tracker.candidate_streak += 1
        else:
            tracker.candidate_key = best
            tracker.candidate_streak = 1

        if tracker.candidate_streak >= cfg.min_consecutive_samples:
            self._switch(tracker, best)
            return best

        self._dwell(tracker)
        return current

    def finish(self, tracker: KeyTracker) -> List[str]:
        """Turn the tracker's visits into the final key sequence."""
        return collapse(remove_bounces(tracker.visits, self._config.min_dwell_for_bounce))

    def map_path(self, path: Iterable[Point]) -> List[str]:
        """Map a whole path in one call. Empty path or layout gives []."""
        if self._layout.is_empty:
            return []
        tracker = KeyTracker()
        for point in path:
            self.feed(tracker, point)
        return self.finish(tracker)

    def _should_switch(self, current: Key, new: Key, p: Point) -> bool:
        if new.rect.contains(p):
            return True
        d_cur = p.distance_to(current.centroid)
        d_new = p.distance_to(new.centroid)
        cfg = self._config
        return d_new <= d_cur * cfg.hysteresis_ratio and (d_cur - d_new) >= cfg.min_distance_gap

    @staticmethod
    def _switch(tracker: KeyTracker, key: Key):
        tracker.current_key = key
        tracker.candidate_key = None
        tracker.candidate_streak = 0
        tracker.visits.append((key.id, 1))

    @staticmethod
    def _dwell(tracker: KeyTracker):
        key_id, dwell = tracker.visits[-1]
        tracker.visits[-1] = (key_id, dwell + 1)


def remove_bounces(visits: Sequence[Tuple[str, int]], min_dwell: int = 2) -> List[str]:
    """
    Drop the middle of A-B-A patterns whose dwell is below min_dwell.

    Neighbours are judged on the original visit list, so a run like
    s-d-s-d-s with single-sample dwells reduces to its end points.
    """
    visits = merge_visits(visits)
    kept = []
    for i, (key_id, dwell) in enumerate(visits):
        if (0 < i < len(visits) - 1
                and visits[i - 1][0] == visits[i + 1][0]
                and dwell < min_dwell):
            continue
        kept.append(key_id)
    return kept


def merge_visits(visits: Sequence[Tuple[str, int]]) -> List[Tuple[str, int]]:
    """Merge adjacent visits to the same key, summing dwell."""
    merged: List[Tuple[str, int]] = []
    for key_id, dwell in visits:
        if merged and merged[-1][0] == key_id:
            merged[-1] = (key_id, merged[-1][1] + dwell)
        else:
            merged.append((key_id, dwell))
    return merged


def collapse(seq: Iterable[str]) -> List[str]:
    """Collapse immediate duplicates ("aaab" -> "ab")."""
    result: List[str] = []
    for key_id in seq:
        if not result or result[-1] != key_id:
            result.append(key_id)
    return result


def sequence_to_text(seq: Iterable[str]) -> str:
    """Join the alphabetic key ids of a sequence into a lookup string."""
    return "".join(k for k in seq if len(k) == 1 and k.isascii() and k.isalpha())


def map_path_to_sequence(layout: Layout, path: Iterable[Point],
                         config: Optional[MappingConfig] = None) -> List[str]:
    return KeySequenceMapper(layout, config).map_path(path)
