"""
Recognizer interface and the key-sequence strategy.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from src.config import PredictionConfig
from src.keyboard.layout import Layout, Point
from .dictionary import DictionaryIndex
from .scoring import CandidateScorer, rank_candidates

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    word: str
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass
class RecognitionRequest:
    """What a recognizer gets to look at for one gesture."""
    key_sequence: str = ""
    path: Sequence[Point] = ()


class Recognizer(ABC):
    """A word recognition strategy over a shared layout and dictionary."""

    name = "base"

    def __init__(self, layout: Layout, dictionary: DictionaryIndex):
        self._layout = layout
        self._dictionary = dictionary
        self.last_shortlist_size = 0

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def dictionary(self) -> DictionaryIndex:
        return self._dictionary

    def update_layout(self, layout: Layout):
        self._layout = layout

    @abstractmethod
    def recognize(self, request: RecognitionRequest) -> List[Candidate]:
        """Ranked candidates, best first. Never raises for bad input."""


class KeySequenceRecognizer(Recognizer):
    """Bucket shortlist + edit distance / bigram / frequency / spatial scoring."""

    name = "keys"

    def __init__(self, layout: Layout, dictionary: DictionaryIndex,
                 config: Optional[PredictionConfig] = None):
        super().__init__(layout, dictionary)
        self._config = config or PredictionConfig()
        self._scorer = CandidateScorer(layout, self._config)

    def update_layout(self, layout: Layout):
        super().update_layout(layout)
        self._scorer.update_layout(layout)

    def recognize(self, request: RecognitionRequest) -> List[Candidate]:
        return self.generate_candidates(request.key_sequence)

    def generate_candidates(self, key_sequence: str) -> List[Candidate]:
        cfg = self._config
        self.last_shortlist_size = 0
        if len(key_sequence) < cfg.min_sequence_length or self._dictionary.is_empty:
            return []

        shortlist = self._dictionary.shortlist(key_sequence, cfg.length_tolerance)
        self.last_shortlist_size = len(shortlist)

        scored = []
        for dw in shortlist:
            score, detail = self._scorer.breakdown(key_sequence, dw)
            scored.append((dw.word, score, detail))

        ranked = rank_candidates(scored, cfg.min_score, cfg.max_candidates)
        return [Candidate(word, score, detail) for word, score, detail in ranked]
