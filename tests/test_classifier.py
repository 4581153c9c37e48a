import pytest
from conftest import center, line

from src.config import GestureConfig
from src.gestures.classifier import GestureClassifier, GestureState, SwipeResult, TapResult
from src.keyboard.layout import Point


@pytest.fixture
def classifier(layout):
    return GestureClassifier(layout)


def swipe(classifier, points, start_ms=0.0, interval_ms=10.0):
    t = start_ms
    classifier.pointer_down(points[0], points[0], t)
    for p in points[1:]:
        t += interval_ms
        classifier.pointer_move(p, p, t)
    return classifier.pointer_up(points[-1], points[-1], t + interval_ms)


def test_quick_press_is_tap(classifier):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((62, 81), (62, 81), 8)
    result = classifier.pointer_up((62, 81), (62, 81), 15)
    assert isinstance(result, TapResult)
    assert result.key_id == 'a'
    assert classifier.state == GestureState.IDLE


def test_fast_flick_stays_tap(classifier):
    # Far enough, but released before the time threshold
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((120, 81), (120, 81), 10)
    result = classifier.pointer_up((120, 81), (120, 81), 20)
    assert isinstance(result, TapResult)
    assert result.key_id == 'a'


def test_slow_jitter_stays_tap(classifier):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((65, 81), (65, 81), 200)
    assert classifier.state == GestureState.TAP_PENDING
    assert isinstance(classifier.pointer_up((65, 81), (65, 81), 300), TapResult)


def test_displacement_past_threshold_is_swipe(classifier):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((80, 81), (80, 81), 10)
    assert classifier.state == GestureState.TAP_PENDING
    classifier.pointer_move((85, 81), (85, 81), 40)
    assert classifier.is_swiping
    result = classifier.pointer_up((90, 81), (90, 81), 50)
    assert isinstance(result, SwipeResult)
    assert result.duration_ms == 50
    assert result.path[0].window_pos == Point(60, 81)
    assert result.path[0].timestamp_ms == 0


def test_swipe_maps_keys(classifier, layout):
    result = swipe(classifier, line(center(layout, 'h'), center(layout, 'i'), 30))
    assert isinstance(result, SwipeResult)
    assert result.key_sequence[0] == 'h'
    assert result.key_sequence[-1] == 'i'
    assert len(result.layout_points) == len(result.path)


def test_resample_distance_limits_samples(layout):
    classifier = GestureClassifier(layout, GestureConfig(smoothing_alpha=1.0, resample_distance=7.0))
    points = [Point(300 + i, 81) for i in range(0, 61)]
    result = swipe(classifier, points)
    gaps = [b.window_pos.x - a.window_pos.x for a, b in zip(result.path, result.path[1:-1])]
    assert all(g >= 7.0 for g in gaps)
    assert len(result.path) < len(points) // 3


def test_smoothing_lags_raw_input(layout):
    classifier = GestureClassifier(layout, GestureConfig(smoothing_alpha=0.4))
    classifier.pointer_down((300, 81), (300, 81), 0)
    classifier.pointer_move((350, 81), (350, 81), 40)
    assert classifier.is_swiping
    last = classifier.current_path[-1]
    assert last.window_pos.x == pytest.approx(320.0)
    assert last.window_pos.y == pytest.approx(81.0)


def test_pending_moves_do_not_advance_smoothing(layout):
    classifier = GestureClassifier(layout, GestureConfig(smoothing_alpha=0.4))
    classifier.pointer_down((300, 81), (300, 81), 0)
    classifier.pointer_move((304, 81), (304, 81), 10)
    assert classifier.state == GestureState.TAP_PENDING
    assert classifier.session.smoothed_window == Point(300, 81)
    # First swipe sample smooths from the press-down point
    classifier.pointer_move((350, 81), (350, 81), 40)
    assert classifier.is_swiping
    assert classifier.current_path[-1].window_pos.x == pytest.approx(320.0)


def test_layout_position_is_clamped(classifier):
    classifier.pointer_down((5, 5), (-50, -50), 0)
    assert classifier.session.start_layout == Point(0, 0)
    result = classifier.pointer_up((5, 5), (-50, -50), 5)
    assert result.key_id == 'q'


def test_reset_cancels_without_result(classifier, layout):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((120, 81), (120, 81), 50)
    assert classifier.is_swiping
    classifier.reset()
    assert classifier.state == GestureState.IDLE
    assert classifier.pointer_up((120, 81), (120, 81), 60) is None


def test_events_without_pointer_down(classifier):
    classifier.pointer_move((60, 81), (60, 81), 0)
    assert classifier.pointer_up((60, 81), (60, 81), 10) is None
    assert classifier.tick(1000) is None


def test_new_pointer_down_drops_gesture(classifier):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((120, 81), (120, 81), 50)
    classifier.pointer_down((390, 81), (390, 81), 100)
    assert classifier.state == GestureState.TAP_PENDING
    assert classifier.pointer_up((390, 81), (390, 81), 110).key_id == 'h'


def test_current_key_follows_swipe(classifier):
    classifier.pointer_down((390, 81), (390, 81), 0)
    classifier.pointer_move((400, 81), (400, 81), 40)
    assert classifier.current_key.id == 'h'


def test_stationary_timeout(layout):
    classifier = GestureClassifier(layout, GestureConfig(stationary_timeout_ms=100))
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((120, 81), (120, 81), 50)
    assert classifier.tick(120) is None
    result = classifier.tick(150)
    assert isinstance(result, SwipeResult)
    assert classifier.state == GestureState.IDLE


def test_stationary_timeout_disabled(classifier):
    classifier.pointer_down((60, 81), (60, 81), 0)
    classifier.pointer_move((120, 81), (120, 81), 50)
    assert classifier.tick(100000) is None
    assert classifier.is_swiping
