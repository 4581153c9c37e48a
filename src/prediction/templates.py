"""
Whole-gesture template matching (shape + location channels).

Every word is pre-rendered as the polyline through its letters' key
centroids and resampled to a fixed number of points. The location channel
compares raw positions; the shape channel compares copies translated to
their centroid and scaled to unit radius. Templates are pruned by the keys
near the gesture's start and end before any distance is computed.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from src.config import TemplateConfig
from src.keyboard.layout import Layout, Point
from .dictionary import DictWord, DictionaryIndex
from .recognizer import Candidate, RecognitionRequest, Recognizer

logger = logging.getLogger(__name__)

# Location distance (px) at which the location score halves
LOCATION_SCALE = 50.0
# Shape distance multiplier for the shape score
SHAPE_SCALE = 10.0


@dataclass
class GestureTemplate:
    entry: DictWord
    sampled: np.ndarray      # (n, 2) location channel
    shape: np.ndarray        # (n, 2) normalized shape channel
    start: Point
    end: Point


def resample(points: np.ndarray, n: int) -> np.ndarray:
    """Resample a polyline to n points evenly spaced along its length."""
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(points) == 0:
        return np.zeros((0, 2))
    if len(points) == 1:
        return np.repeat(points, n, axis=0)

    seg = np.linalg.norm(np.diff(points, axis=0), axis=1)
    keep = np.concatenate(([True], seg > 1e-9))
    points = points[keep]
    seg = seg[seg > 1e-9]
    if len(points) == 1:
        return np.repeat(points, n, axis=0)

    cumulative = np.concatenate(([0.0], np.cumsum(seg)))
    targets = np.linspace(0.0, cumulative[-1], n)
    xs = np.interp(targets, cumulative, points[:, 0])
    ys = np.interp(targets, cumulative, points[:, 1])
    return np.column_stack((xs, ys))


def normalize_shape(points: np.ndarray) -> np.ndarray:
    """Translate the centroid to the origin and scale to unit radius."""
    if len(points) == 0:
        return points
    centered = points - points.mean(axis=0)
    radius = float(np.linalg.norm(centered, axis=1).max())
    if radius < 1e-9:
        return centered
    return centered / radius


def mean_distances(batch: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """Mean point-to-point distance of each (n, 2) entry in batch to reference."""
    return np.linalg.norm(batch - reference[np.newaxis, :, :], axis=2).mean(axis=1)


def rank_score(rank: int) -> float:
    return 1.0 / math.log2(max(rank, 1) + 1)


class TemplateRecognizer(Recognizer):
    """Shape/location template matching over start/end-pruned words."""

    name = "template"

    def __init__(self, layout: Layout, dictionary: DictionaryIndex,
                 config: Optional[TemplateConfig] = None):
        super().__init__(layout, dictionary)
        self._config = config or TemplateConfig()
        self._templates: Dict[str, GestureTemplate] = {}
        self._build_templates()

    def __len__(self) -> int:
        return len(self._templates)

    def update_layout(self, layout: Layout):
        super().update_layout(layout)
        self._build_templates()

    def template(self, word: str) -> Optional[GestureTemplate]:
        return self._templates.get(word)

    def _build_templates(self):
        self._templates = {}
        if self._layout.is_empty:
            return
        n = self._config.sample_points
        for entry in self._dictionary.words:
            if entry.length < 2:
                continue
            centers = [self._layout.centroid(c) for c in entry.word]
            centers = [c for c in centers if c is not None]
            if not centers:
                continue
            raw = np.array([(c.x, c.y) for c in centers], dtype=float)
            sampled = resample(raw, n)
            self._templates[entry.word] = GestureTemplate(
                entry=entry,
                sampled=sampled,
                shape=normalize_shape(sampled),
                start=centers[0],
                end=centers[-1],
            )
        logger.debug("Built %d gesture templates", len(self._templates))

    def recognize(self, request: RecognitionRequest) -> List[Candidate]:
        path = list(request.path)
        if not path and request.key_sequence:
            # Typed sequence only: trace it over the key centroids
            path = [c for c in map(self._layout.centroid, request.key_sequence) if c is not None]
        self.last_shortlist_size = 0
        if len(path) < 2 or not self._templates:
            return []

        cfg = self._config
        start, end = path[0], path[-1]
        if request.key_sequence:
            estimated_len = len(request.key_sequence)
        else:
            estimated_len = max(2, len(path) // 10)

        pruned = self.prune(start, end, estimated_len)
        self.last_shortlist_size = len(pruned)
        if not pruned:
            return []

        raw = np.array([(p.x, p.y) for p in path], dtype=float)
        sampled = resample(raw, cfg.sample_points)
        shape = normalize_shape(sampled)

        shape_d = mean_distances(np.stack([t.shape for t in pruned]), shape)
        location_d = mean_distances(np.stack([t.sampled for t in pruned]), sampled)

        scored = []
        for tmpl, sd, ld in zip(pruned, shape_d, location_d):
            shape_score = 1.0 / (1.0 + float(sd) * SHAPE_SCALE)
            location_score = 1.0 / (1.0 + float(ld) / LOCATION_SCALE)
            frequency_score = rank_score(tmpl.entry.frequency_rank)

            endpoint_bonus = 0.0
            if start.distance_to(tmpl.start) < cfg.pruning_radius:
                endpoint_bonus += cfg.endpoint_bonus
            if end.distance_to(tmpl.end) < cfg.pruning_radius:
                endpoint_bonus += cfg.endpoint_bonus
            length_bonus = min(cfg.max_length_bonus, tmpl.entry.length * cfg.length_bonus_per_char)

            score = (cfg.shape_weight * shape_score
                     + cfg.location_weight * location_score
                     + cfg.frequency_weight * frequency_score
                     + endpoint_bonus + length_bonus)
            scored.append(Candidate(tmpl.entry.word, score, {
                'shape_distance': float(sd),
                'location_distance': float(ld),
                'frequency_score': frequency_score,
                'endpoint_bonus': endpoint_bonus,
                'length_bonus': length_bonus,
            }))

        scored.sort(key=lambda c: c.score, reverse=True)
        return scored[:cfg.max_candidates]

    def prune(self, start: Point, end: Point, estimated_len: int) -> List[GestureTemplate]:
        """
        Templates whose first/last letters sit near the gesture's end points.
        Falls back to neighbouring keys when too few templates survive.
        """
        cfg = self._config
        start_keys = self._keys_near(start)
        end_keys = self._keys_near(end)
        found = self._collect(start_keys, end_keys, estimated_len)
        if len(found) >= cfg.min_pruned:
            return found

        start_keys = self._expand(start_keys)
        end_keys = self._expand(end_keys)
        return self._collect(start_keys, end_keys, estimated_len)

    def _keys_near(self, p: Point) -> List[str]:
        radius = self._config.pruning_radius
        alpha = [k for k in self._layout.keys if k.is_alpha]
        near = [k.id for k in alpha if p.distance_to(k.centroid) <= radius]
        if near or not alpha:
            return near
        closest = min(alpha, key=lambda k: p.distance_squared_to(k.centroid))
        return [closest.id]

    def _expand(self, keys: Sequence[str]) -> List[str]:
        expanded = list(keys)
        for c in keys:
            for n in self._layout.neighbors(c, self._config.neighbor_radius):
                if n not in expanded:
                    expanded.append(n)
        return expanded

    def _collect(self, start_keys: Sequence[str], end_keys: Sequence[str],
                 estimated_len: int) -> List[GestureTemplate]:
        tolerance = self._config.length_tolerance
        seen = set()
        found = []
        for s in start_keys:
            for e in end_keys:
                for entry in self._dictionary.bucket(s, e):
                    if entry.word in seen:
                        continue
                    tmpl = self._templates.get(entry.word)
                    if tmpl is None or abs(entry.length - estimated_len) > tolerance:
                        continue
                    seen.add(entry.word)
                    found.append(tmpl)
        return found
