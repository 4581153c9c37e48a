"""
Qt worker wrapping the recognition pipeline.
Can be moved to a QThread so ranking never blocks the UI; results come back
as signals tagged with the gesture's sequence number.
"""
import logging
import time
from typing import Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from src.config import Config
from src.keyboard.layout import Layout
from src.prediction.dictionary import DictionaryIndex
from .classifier import TapResult
from .pipeline import CandidateResponse, RecognitionPipeline
from .trace import replay

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class RecognitionWorker(QObject):
    """
    Worker class that owns a RecognitionPipeline.
    Emits signals for UI updates.
    """
    # Signals
    gesture_started = pyqtSignal(int)       # Emits sequence number
    tap_detected = pyqtSignal(object)       # Emits TapResult
    candidates_ready = pyqtSignal(object)   # Emits CandidateResponse
    error = pyqtSignal(str)
    stop_requested = pyqtSignal()           # Connect to stop_process across threads

    def __init__(self, layout: Layout, dictionary: Optional[DictionaryIndex] = None,
                 config: Optional[Config] = None, parent=None):
        super().__init__(parent)
        self._config = config or Config()
        self._pipeline = RecognitionPipeline(layout, dictionary, self._config)
        self._pipeline.add_listener(self._on_result)
        self._timer: Optional[QTimer] = None

    @property
    def pipeline(self) -> RecognitionPipeline:
        return self._pipeline

    def start_process(self):
        """Start the stationary-timeout timer in the worker thread, if enabled."""
        timeout = self._config.gestures.stationary_timeout_ms
        if timeout <= 0:
            return
        interval = max(10, int(timeout / 4))
        self._timer = QTimer(self)
        self._timer.timeout.connect(self.tick)
        self._timer.start(interval)
        logger.debug("Stationary check every %dms", interval)

    def stop_process(self):
        """Stop the timer and drop any gesture in progress.

        Must run in the thread that owns the worker, since that is where the
        timer was created. From another thread emit stop_requested instead.
        """
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._pipeline.reset()

    def pointer_down(self, window_pos, layout_pos, timestamp_ms: Optional[float] = None):
        try:
            sequence = self._pipeline.pointer_down(window_pos, layout_pos, _stamp(timestamp_ms))
        except Exception as e:
            self.error.emit(f"Worker Exception: {str(e)}")
            return
        if sequence is not None:
            self.gesture_started.emit(sequence)

    def pointer_move(self, window_pos, layout_pos, timestamp_ms: Optional[float] = None):
        try:
            self._pipeline.pointer_move(window_pos, layout_pos, _stamp(timestamp_ms))
        except Exception as e:
            self.error.emit(f"Worker Exception: {str(e)}")

    def pointer_up(self, window_pos, layout_pos, timestamp_ms: Optional[float] = None):
        try:
            self._pipeline.pointer_up(window_pos, layout_pos, _stamp(timestamp_ms))
        except Exception as e:
            self.error.emit(f"Worker Exception: {str(e)}")

    def tick(self, timestamp_ms: Optional[float] = None):
        try:
            self._pipeline.tick(_stamp(timestamp_ms))
        except Exception as e:
            self.error.emit(f"Worker Exception: {str(e)}")

    def reset(self):
        self._pipeline.reset()

    def replay_events(self, events):
        """Feed a recorded or synthetic event list through the pipeline."""
        try:
            replay(self, events)
        except Exception as e:
            self.error.emit(f"Worker Exception: {str(e)}")

    def _on_result(self, result):
        if isinstance(result, TapResult):
            self.tap_detected.emit(result)
        elif isinstance(result, CandidateResponse):
            self.candidates_ready.emit(result)


def _stamp(timestamp_ms: Optional[float]) -> float:
    return _now_ms() if timestamp_ms is None else float(timestamp_ms)
