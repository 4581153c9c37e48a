"""
Key-sequence candidate scoring.

score = w_edit * (-edit distance) + w_bigram * bigram overlap
        + w_frequency * ln(1 + frequency) + w_spatial * spatial score
"""
import math
from typing import List, Optional, Set, Tuple

from src.config import PredictionConfig
from src.keyboard.layout import Layout
from .dictionary import DictWord


def levenshtein(s1: str, s2: str, limit: int) -> int:
    """
    Case-insensitive edit distance with early exit.
    Returns limit + 1 as soon as the distance is known to exceed limit.
    """
    s1 = s1.lower()
    s2 = s2.lower()
    n, m = len(s1), len(s2)
    if abs(n - m) > limit:
        return limit + 1

    prev = list(range(m + 1))
    for i in range(1, n + 1):
        curr = [i] + [0] * m
        row_min = i
        c1 = s1[i - 1]
        for j in range(1, m + 1):
            cost = 0 if c1 == s2[j - 1] else 1
            curr[j] = min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost)
            if curr[j] < row_min:
                row_min = curr[j]
        if row_min > limit:
            return limit + 1
        prev = curr
    return prev[m]


def bigrams(s: str) -> Set[Tuple[str, str]]:
    """Adjacent alphabetic character pairs (lowercased)."""
    s = s.lower()
    return {
        (a, b) for a, b in zip(s, s[1:])
        if a.isascii() and a.isalpha() and b.isascii() and b.isalpha()
    }


def bigram_overlap(keys: str, word: str) -> int:
    return len(bigrams(keys) & bigrams(word))


def spatial_score(layout: Layout, keys: str, word: str, norm_distance: float = 60.0) -> float:
    """
    Average centroid distance between proportionally aligned characters,
    mapped to max(-1, 1 - avg / norm_distance). 0 when nothing aligns.
    """
    total = 0.0
    pairs = 0
    ki = wi = 0
    while ki < len(keys) and wi < len(word):
        a = layout.centroid(keys[ki])
        b = layout.centroid(word[wi])
        if a is not None and b is not None:
            total += a.distance_to(b)
            pairs += 1

        # Advance whichever side has more characters left
        keys_left = len(keys) - ki
        word_left = len(word) - wi
        if keys_left > word_left:
            ki += 1
        elif word_left > keys_left:
            wi += 1
        else:
            ki += 1
            wi += 1

    if pairs == 0 or norm_distance <= 0:
        return 0.0
    return max(-1.0, 1.0 - (total / pairs) / norm_distance)


class CandidateScorer:
    """Scores dictionary words against a key sequence."""

    def __init__(self, layout: Layout, config: Optional[PredictionConfig] = None):
        self._layout = layout
        self._config = config or PredictionConfig()

    def update_layout(self, layout: Layout):
        self._layout = layout

    def components(self, keys: str, dw: DictWord) -> dict:
        cfg = self._config
        return {
            'edit_distance': levenshtein(keys, dw.word, cfg.edit_distance_limit),
            'bigram_overlap': bigram_overlap(keys, dw.word),
            'frequency': math.log1p(max(dw.frequency, 0.0)),
            'spatial': spatial_score(self._layout, keys, dw.word, cfg.spatial_norm_distance),
        }

    def combine(self, parts: dict) -> float:
        cfg = self._config
        return (-cfg.w_edit_distance * parts['edit_distance']
                + cfg.w_bigram_overlap * parts['bigram_overlap']
                + cfg.w_frequency * parts['frequency']
                + cfg.w_spatial * parts['spatial'])

    def score(self, keys: str, dw: DictWord) -> float:
        return self.combine(self.components(keys, dw))

    def breakdown(self, keys: str, dw: DictWord) -> Tuple[float, dict]:
        """Score plus weighted contributions of each component."""
        cfg = self._config
        parts = self.components(keys, dw)
        detail = {
            'edit_distance': parts['edit_distance'],
            'bigram_overlap': parts['bigram_overlap'],
            'edit_contribution': -cfg.w_edit_distance * parts['edit_distance'],
            'bigram_contribution': cfg.w_bigram_overlap * parts['bigram_overlap'],
            'frequency_contribution': cfg.w_frequency * parts['frequency'],
            'spatial_contribution': cfg.w_spatial * parts['spatial'],
        }
        return self.combine(parts), detail


def rank_candidates(scored: List[Tuple[str, float, dict]], min_score: Optional[float],
                    max_candidates: int) -> List[Tuple[str, float, dict]]:
    """Drop entries below min_score, sort by score descending (stable), truncate."""
    kept = [s for s in scored if min_score is None or s[1] >= min_score]
    kept.sort(key=lambda s: s[1], reverse=True)
    return kept[:max_candidates]
