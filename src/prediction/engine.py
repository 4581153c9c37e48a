"""
Word prediction engine for swipe-typing.
Selects a recognition strategy from configuration and ranks candidates for
a key sequence or a completed swipe.
"""
import logging
import time
from enum import Enum, auto
from typing import List, Optional, Sequence, Union

from src.config import Config
from src.keyboard.layout import Layout, Point
from src.keyboard.mapper import sequence_to_text
from .dictionary import DictionaryIndex
from .recognizer import Candidate, KeySequenceRecognizer, RecognitionRequest, Recognizer
from .templates import TemplateRecognizer

logger = logging.getLogger(__name__)


class Confidence(Enum):
    LOW = auto()
    MEDIUM = auto()
    HIGH = auto()


def get_confidence(candidates: Sequence[Candidate]) -> Confidence:
    """Confidence from the top score and its lead over the runner-up."""
    if not candidates:
        return Confidence.LOW
    top = candidates[0].score
    gap = top - candidates[1].score if len(candidates) > 1 else abs(top)
    if gap > 5.0 and top > 0:
        return Confidence.HIGH
    if gap > 2.0 and top > -3.0:
        return Confidence.MEDIUM
    return Confidence.LOW


class PredictionEngine:
    """
    Predicts words for swipe gestures.

    Holds the read-only layout and dictionary and delegates ranking to the
    configured recognizer ("keys" or "template"). An empty dictionary or
    layout yields no candidates.
    """

    def __init__(self, layout: Layout, dictionary: Optional[DictionaryIndex] = None,
                 config: Optional[Config] = None):
        self._config = config or Config()
        self._layout = layout
        self._dictionary = dictionary if dictionary is not None else DictionaryIndex()
        self._recognizer = self.create_recognizer(self._config.prediction.strategy)

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def dictionary(self) -> DictionaryIndex:
        return self._dictionary

    @property
    def recognizer(self) -> Recognizer:
        return self._recognizer

    @property
    def strategy(self) -> str:
        return self._recognizer.name

    def create_recognizer(self, strategy: str) -> Recognizer:
        if strategy == TemplateRecognizer.name:
            return TemplateRecognizer(self._layout, self._dictionary, self._config.templates)
        return KeySequenceRecognizer(self._layout, self._dictionary, self._config.prediction)

    def set_strategy(self, strategy: str):
        if strategy != self.strategy:
            self._recognizer = self.create_recognizer(strategy)

    def update_layout(self, layout: Layout):
        """Update key positions when the layout changes."""
        self._layout = layout
        self._recognizer.update_layout(layout)

    def generate_candidates(self, key_sequence: Union[str, Sequence[str]]) -> List[Candidate]:
        """Rank words for a key sequence ("helo" or ["h", "e", "l", "o"])."""
        if not isinstance(key_sequence, str):
            key_sequence = sequence_to_text(key_sequence)
        return self._run(RecognitionRequest(key_sequence=key_sequence))

    def predict(self, key_sequence: Union[str, Sequence[str]] = "",
                path: Sequence[Point] = ()) -> List[Candidate]:
        """Rank words for a key sequence and/or layout-space path."""
        if not isinstance(key_sequence, str):
            key_sequence = sequence_to_text(key_sequence)
        return self._run(RecognitionRequest(key_sequence=key_sequence, path=list(path)))

    def recognize_swipe(self, swipe) -> List[Candidate]:
        """Rank words for a completed SwipeResult."""
        return self.predict(swipe.key_sequence, swipe.layout_points)

    def _run(self, request: RecognitionRequest) -> List[Candidate]:
        start = time.perf_counter()
        if self._dictionary.is_empty or self._layout.is_empty:
            candidates = []
            self._recognizer.last_shortlist_size = 0
        else:
            candidates = self._recognizer.recognize(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        logger.debug(
            "[%s] points=%d keys=%d shortlist=%d candidates=%d top=%s elapsed=%.2fms",
            self.strategy,
            len(request.path),
            len(request.key_sequence),
            self._recognizer.last_shortlist_size,
            len(candidates),
            candidates[0].word if candidates else None,
            elapsed_ms,
        )
        return candidates
