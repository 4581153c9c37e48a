import json

from src.gestures.classifier import GestureClassifier, SwipeResult
from src.gestures.trace import load_trace, parse_trace, replay, synthesize_swipe
from src.keyboard.layout import Point


def test_synthesize_swipe_shape(layout):
    events = synthesize_swipe(layout, "hi")
    assert events[0].kind == "down"
    assert events[-1].kind == "up"
    assert all(e.kind == "move" for e in events[1:-1])
    assert events[0].window_pos == layout.centroid('h')
    assert events[-1].window_pos == layout.centroid('i')
    times = [e.timestamp_ms for e in events]
    assert times == sorted(times)


def test_synthesize_unknown_letter(layout):
    assert synthesize_swipe(layout, "h3") == []
    assert synthesize_swipe(layout, "") == []


def test_parse_trace_defaults_layout_position():
    events = parse_trace([
        {"type": "down", "x": 1, "y": 2, "t": 0},
        {"type": "MOVE", "x": 3, "y": 4, "lx": 30, "ly": 40, "t": 5},
        {"type": "hover", "x": 0, "y": 0, "t": 6},
        {"type": "up", "x": 3, "t": 7},
        "junk",
    ])
    assert [e.kind for e in events] == ["down", "move"]
    assert events[0].layout_pos == Point(1, 2)
    assert events[1].layout_pos == Point(30, 40)


def test_load_trace(tmp_path):
    path = tmp_path / "trace.json"
    path.write_text(json.dumps([
        {"type": "down", "x": 60, "y": 81, "t": 0},
        {"type": "up", "x": 60, "y": 81, "t": 10},
    ]))
    assert len(load_trace(path)) == 2


def test_load_trace_failures(tmp_path):
    assert load_trace(tmp_path / "missing.json") == []
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert load_trace(bad) == []
    obj = tmp_path / "obj.json"
    obj.write_text('{"type": "down"}')
    assert load_trace(obj) == []


def test_undecodable_trace_is_empty(tmp_path):
    path = tmp_path / "trace.json"
    path.write_bytes(b'[{"type": "down", "x": \xff\xfe}]')
    assert load_trace(path) == []


def test_replay_into_classifier(layout):
    results = replay(GestureClassifier(layout), synthesize_swipe(layout, "hello"))
    assert len(results) == 1
    assert isinstance(results[0], SwipeResult)
    assert results[0].key_sequence[0] == 'h'
    assert results[0].key_sequence[-1] == 'o'
