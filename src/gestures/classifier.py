"""
Gesture classification from pointer events.
Separates taps from swipes and accumulates a smoothed, resampled swipe path.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from src.config import GestureConfig, MappingConfig
from src.keyboard.layout import Key, Layout, Point
from src.keyboard.mapper import KeySequenceMapper, KeyTracker

logger = logging.getLogger(__name__)

PointLike = Union[Point, Tuple[float, float]]


class GestureState(Enum):
    """Classifier states."""
    IDLE = auto()         # Waiting for pointer-down
    TAP_PENDING = auto()  # Pointer down, not yet classified
    SWIPING = auto()      # Active swipe
    COMPLETED = auto()    # Swipe finished (transient)
    TAPPED = auto()       # Tap finished (transient)


@dataclass(frozen=True)
class PathPoint:
    """One gesture sample in both coordinate spaces."""
    window_pos: Point
    layout_pos: Point
    timestamp_ms: float


@dataclass
class TapResult:
    key_id: Optional[str]
    position: Point


@dataclass
class SwipeResult:
    path: List[PathPoint]
    key_sequence: List[str]
    duration_ms: float

    @property
    def layout_points(self) -> List[Point]:
        return [p.layout_pos for p in self.path]


GestureResult = Union[TapResult, SwipeResult]


@dataclass
class GestureSession:
    """
    State of one pointer-down to pointer-up interaction.
    Created on pointer-down and dropped once a result is emitted.
    """
    state: GestureState
    start_window: Point
    start_layout: Point
    start_time_ms: float
    smoothed_window: Point
    smoothed_layout: Point
    last_motion_ms: float
    path: List[PathPoint] = field(default_factory=list)
    tracker: KeyTracker = field(default_factory=KeyTracker)


class GestureClassifier:
    """
    Tap/swipe state machine.

    A press stays a tap candidate until it has moved at least the deadzone
    radius AND the time threshold has elapsed. Requiring both keeps fast
    flicks and slow jitter from turning into swipes.
    """

    def __init__(self, layout: Layout, config: Optional[GestureConfig] = None,
                 mapping: Optional[MappingConfig] = None):
        """
        Initialize classifier.

        Args:
            layout: Key layout used for hit-testing and mapping
            config: Tap/swipe thresholds, smoothing and resampling
            mapping: Hysteresis settings for the key mapper
        """
        self._layout = layout
        self._config = config or GestureConfig()
        self._mapper = KeySequenceMapper(layout, mapping)
        self._session: Optional[GestureSession] = None

    @property
    def state(self) -> GestureState:
        return self._session.state if self._session else GestureState.IDLE

    @property
    def is_swiping(self) -> bool:
        return self.state == GestureState.SWIPING

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    @property
    def current_path(self) -> List[PathPoint]:
        return list(self._session.path) if self._session else []

    @property
    def current_key(self) -> Optional[Key]:
        """Key the swipe is currently on (for live highlighting)."""
        return self._session.tracker.current_key if self._session else None

    def update_layout(self, layout: Layout):
        self.reset()
        self._layout = layout
        self._mapper.update_layout(layout)

    def pointer_down(self, window_pos: PointLike, layout_pos: PointLike, timestamp_ms: float):
        """Start a new gesture. Any gesture in progress is dropped."""
        if self._session is not None:
            logger.debug("pointer_down during %s, discarding gesture", self.state.name)
        window = _as_point(window_pos)
        layout = self._layout.clamp(_as_point(layout_pos))
        self._session = GestureSession(
            state=GestureState.TAP_PENDING,
            start_window=window,
            start_layout=layout,
            start_time_ms=timestamp_ms,
            smoothed_window=window,
            smoothed_layout=layout,
            last_motion_ms=timestamp_ms,
        )

    def pointer_move(self, window_pos: PointLike, layout_pos: PointLike, timestamp_ms: float):
        """Feed a move sample. Moves without a pointer-down are ignored."""
        session = self._session
        if session is None:
            return

        window = _as_point(window_pos)
        layout = self._layout.clamp(_as_point(layout_pos))

        if session.state == GestureState.TAP_PENDING:
            dist = session.start_window.distance_to(window)
            elapsed = timestamp_ms - session.start_time_ms
            if dist >= self._config.deadzone_radius and elapsed > self._config.time_threshold_ms:
                self._transition(GestureState.SWIPING)
                self._append(PathPoint(session.start_window, session.start_layout,
                                       session.start_time_ms))

        # The filter stays at the press-down point until the swipe starts
        if session.state == GestureState.SWIPING:
            smoothed_window = self._smooth(window, session.smoothed_window)
            smoothed_layout = self._smooth(layout, session.smoothed_layout)
            session.smoothed_window = smoothed_window
            session.smoothed_layout = smoothed_layout

            candidate = PathPoint(smoothed_window, smoothed_layout, timestamp_ms)
            if self._should_add_sample(candidate):
                self._append(candidate)
                session.last_motion_ms = timestamp_ms

    def pointer_up(self, window_pos: PointLike, layout_pos: PointLike,
                   timestamp_ms: float) -> Optional[GestureResult]:
        """
        Finish the gesture.

        Returns:
            TapResult if the press never left the tap candidate state,
            SwipeResult for a swipe, None without a pointer-down.
        """
        session = self._session
        if session is None:
            return None

        if session.state == GestureState.TAP_PENDING:
            self._transition(GestureState.TAPPED)
            key = self._layout.find_key(session.start_layout)
            result = TapResult(key_id=key.id if key else None, position=session.start_layout)
            logger.debug("Tap on %s", result.key_id)
            self._session = None
            return result

        if session.state == GestureState.SWIPING:
            window = _as_point(window_pos)
            layout = self._layout.clamp(_as_point(layout_pos))
            self._append(PathPoint(
                self._smooth(window, session.smoothed_window),
                self._smooth(layout, session.smoothed_layout),
                timestamp_ms,
            ))
            return self._complete(timestamp_ms)

        self._session = None
        return None

    def tick(self, timestamp_ms: float) -> Optional[SwipeResult]:
        """Complete a swipe that has not moved for the stationary timeout."""
        session = self._session
        timeout = self._config.stationary_timeout_ms
        if session is None or session.state != GestureState.SWIPING or timeout <= 0:
            return None
        if timestamp_ms - session.last_motion_ms < timeout:
            return None
        logger.debug("Swipe stationary for %.0fms, completing", timestamp_ms - session.last_motion_ms)
        return self._complete(timestamp_ms)

    def reset(self):
        """Cancel any gesture in progress without emitting a result."""
        if self._session is not None:
            logger.debug("Reset from %s", self.state.name)
        self._session = None

    def _complete(self, timestamp_ms: float) -> SwipeResult:
        session = self._session
        self._transition(GestureState.COMPLETED)
        result = SwipeResult(
            path=list(session.path),
            key_sequence=self._mapper.finish(session.tracker),
            duration_ms=float(timestamp_ms - session.start_time_ms),
        )
        logger.debug("Swipe: %d points -> %s in %.0fms",
                     len(result.path), "".join(result.key_sequence), result.duration_ms)
        self._session = None
        return result

    def _append(self, point: PathPoint):
        session = self._session
        session.path.append(point)
        self._mapper.feed(session.tracker, point.layout_pos)

    def _should_add_sample(self, candidate: PathPoint) -> bool:
        path = self._session.path
        if not path:
            return True
        return candidate.window_pos.distance_to(path[-1].window_pos) >= self._config.resample_distance

    def _smooth(self, raw: Point, prev: Point) -> Point:
        a = self._config.smoothing_alpha
        return Point(a * raw.x + (1 - a) * prev.x, a * raw.y + (1 - a) * prev.y)

    def _transition(self, new_state: GestureState):
        logger.debug("%s -> %s", self._session.state.name, new_state.name)
        self._session.state = new_state


def _as_point(p: PointLike) -> Point:
    if isinstance(p, Point):
        return p
    return Point(float(p[0]), float(p[1]))
