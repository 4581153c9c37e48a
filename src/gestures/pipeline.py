"""
Synchronous recognition pipeline.

Pointer events go in; taps and ranked candidate responses come out. Each
gesture is processed to completion before the next event is looked at:
events that arrive re-entrantly (for example from a listener reacting to a
result) are queued and replayed once the current one is done.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Tuple, Union

from src.config import Config
from src.keyboard.layout import Layout
from src.prediction.dictionary import DictionaryIndex
from src.prediction.engine import Confidence, PredictionEngine, get_confidence
from src.prediction.recognizer import Candidate
from .classifier import GestureClassifier, PointLike, SwipeResult, TapResult

logger = logging.getLogger(__name__)


@dataclass
class CandidateResponse:
    """Ranked words for one swipe, tagged with the gesture's sequence number."""
    sequence: int
    swipe: SwipeResult
    candidates: List[Candidate] = field(default_factory=list)
    confidence: Confidence = Confidence.LOW

    @property
    def best(self) -> Optional[str]:
        return self.candidates[0].word if self.candidates else None

    @property
    def words(self) -> List[str]:
        return [c.word for c in self.candidates]


PipelineResult = Union[TapResult, CandidateResponse]
Listener = Callable[[PipelineResult], None]


class ResponseGate:
    """
    Consumer-side filter for responses crossing an asynchronous boundary.

    Only a response carrying the most recently issued sequence number is
    accepted; anything older belongs to a superseded gesture.
    """

    def __init__(self):
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self, sequence: int):
        if sequence > self._latest:
            self._latest = sequence

    def accept(self, response: CandidateResponse) -> bool:
        if response.sequence != self._latest:
            logger.debug("Dropping stale response #%d (latest #%d)", response.sequence, self._latest)
            return False
        return True


class RecognitionPipeline:
    """
    Gesture classifier + prediction engine behind one event interface.

    Every pointer-down starts a new gesture and increments the sequence
    number, as does reset(). Swipe results are ranked immediately and
    returned as a CandidateResponse; taps pass through unchanged.
    """

    def __init__(self, layout: Layout, dictionary: Optional[DictionaryIndex] = None,
                 config: Optional[Config] = None):
        self._config = config or Config()
        self._classifier = GestureClassifier(layout, self._config.gestures, self._config.mapping)
        self._engine = PredictionEngine(layout, dictionary, self._config)
        self._sequence = 0
        self._listeners: List[Listener] = []
        self._pending: Deque[Tuple[Callable, tuple]] = deque()
        self._busy = False

    @property
    def classifier(self) -> GestureClassifier:
        return self._classifier

    @property
    def engine(self) -> PredictionEngine:
        return self._engine

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def pending_events(self) -> int:
        return len(self._pending)

    def add_listener(self, listener: Listener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update_layout(self, layout: Layout):
        """Swap layouts. Cancels the gesture in progress."""
        self._classifier.update_layout(layout)
        self._engine.update_layout(layout)
        self._sequence += 1

    def pointer_down(self, window_pos: PointLike, layout_pos: PointLike,
                     timestamp_ms: float) -> Optional[int]:
        """Start a gesture. Returns its sequence number, None if queued."""
        return self._dispatch(self._on_down, window_pos, layout_pos, timestamp_ms)

    def pointer_move(self, window_pos: PointLike, layout_pos: PointLike, timestamp_ms: float):
        self._dispatch(self._on_move, window_pos, layout_pos, timestamp_ms)

    def pointer_up(self, window_pos: PointLike, layout_pos: PointLike,
                   timestamp_ms: float) -> Optional[PipelineResult]:
        """Finish a gesture. Returns the tap or candidate response, if any."""
        return self._dispatch(self._on_up, window_pos, layout_pos, timestamp_ms)

    def tick(self, timestamp_ms: float) -> Optional[CandidateResponse]:
        """Complete a motionless swipe once the stationary timeout expires."""
        return self._dispatch(self._on_tick, timestamp_ms)

    def reset(self):
        """Cancel the gesture in progress (focus loss etc.) without a result."""
        self._dispatch(self._on_reset)

    def _dispatch(self, handler: Callable, *args):
        if self._busy:
            self._pending.append((handler, args))
            logger.debug("Queued %s while busy (%d pending)", handler.__name__, len(self._pending))
            return None

        self._busy = True
        try:
            result = handler(*args)
            while self._pending:
                queued, queued_args = self._pending.popleft()
                queued(*queued_args)
        except Exception:
            # Queued events belong to the failed dispatch; never replay them later
            if self._pending:
                logger.warning("Dropping %d queued events after error", len(self._pending))
                self._pending.clear()
            raise
        finally:
            self._busy = False
        return result

    def _on_down(self, window_pos, layout_pos, timestamp_ms) -> int:
        self._sequence += 1
        self._classifier.pointer_down(window_pos, layout_pos, timestamp_ms)
        return self._sequence

    def _on_move(self, window_pos, layout_pos, timestamp_ms):
        self._classifier.pointer_move(window_pos, layout_pos, timestamp_ms)

    def _on_up(self, window_pos, layout_pos, timestamp_ms) -> Optional[PipelineResult]:
        result = self._classifier.pointer_up(window_pos, layout_pos, timestamp_ms)
        if isinstance(result, SwipeResult):
            result = self._respond(result)
        if result is not None:
            self._notify(result)
        return result

    def _on_tick(self, timestamp_ms) -> Optional[CandidateResponse]:
        swipe = self._classifier.tick(timestamp_ms)
        if swipe is None:
            return None
        response = self._respond(swipe)
        self._notify(response)
        return response

    def _on_reset(self):
        self._classifier.reset()
        self._sequence += 1

    def _respond(self, swipe: SwipeResult) -> CandidateResponse:
        candidates = self._engine.recognize_swipe(swipe)
        return CandidateResponse(
            sequence=self._sequence,
            swipe=swipe,
            candidates=candidates,
            confidence=get_confidence(candidates),
        )

    def _notify(self, result: PipelineResult):
        for listener in list(self._listeners):
            listener(result)
