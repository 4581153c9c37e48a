"""
Pointer traces: recorded or synthetic event streams for replaying gestures.

A trace file is a JSON list of events:
    {"type": "down" | "move" | "up", "x": .., "y": .., "t": ..}
with optional "lx"/"ly" layout coordinates (default: same as x/y).
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from src.keyboard.layout import Layout, Point

logger = logging.getLogger(__name__)

EVENT_TYPES = ("down", "move", "up")


@dataclass(frozen=True)
class PointerEvent:
    kind: str
    window_pos: Point
    layout_pos: Point
    timestamp_ms: float


def parse_trace(items: Iterable[dict]) -> List[PointerEvent]:
    """Build events from decoded JSON. Malformed entries are skipped."""
    events = []
    skipped = 0
    for item in items:
        try:
            kind = str(item["type"]).lower()
            if kind not in EVENT_TYPES:
                raise ValueError(kind)
            window = Point(float(item["x"]), float(item["y"]))
            layout = Point(float(item.get("lx", window.x)), float(item.get("ly", window.y)))
            events.append(PointerEvent(kind, window, layout, float(item["t"])))
        except (KeyError, TypeError, ValueError, AttributeError):
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed trace events", skipped)
    return events


def load_trace(path: Path) -> List[PointerEvent]:
    """Read a JSON trace file. Returns [] if it cannot be read."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not load trace %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Trace %s is not a list of events", path)
        return []
    return parse_trace(data)


def synthesize_swipe(layout: Layout, word: str, step: float = 5.0,
                     interval_ms: float = 8.0, start_ms: float = 0.0) -> List[PointerEvent]:
    """
    Straight-line swipe through the centroids of a word's letters.

    Returns [] if any letter is missing from the layout.
    """
    centers: List[Optional[Point]] = [layout.centroid(c) for c in word]
    if not centers or any(c is None for c in centers):
        return []

    points = [centers[0]]
    for a, b in zip(centers, centers[1:]):
        dist = a.distance_to(b)
        count = max(1, int(dist // step))
        for i in range(1, count + 1):
            f = i / count
            points.append(Point(a.x + (b.x - a.x) * f, a.y + (b.y - a.y) * f))

    events = []
    t = start_ms
    for i, p in enumerate(points):
        kind = "down" if i == 0 else "move"
        events.append(PointerEvent(kind, p, p, t))
        t += interval_ms
    last = points[-1]
    events.append(PointerEvent("up", last, last, t))
    return events


def replay(target, events: Iterable[PointerEvent]) -> list:
    """
    Feed events to anything with pointer_down/move/up (classifier,
    pipeline or worker). Returns the non-None results of pointer_up.
    """
    results = []
    for event in events:
        if event.kind == "down":
            target.pointer_down(event.window_pos, event.layout_pos, event.timestamp_ms)
        elif event.kind == "move":
            target.pointer_move(event.window_pos, event.layout_pos, event.timestamp_ms)
        else:
            result = target.pointer_up(event.window_pos, event.layout_pos, event.timestamp_ms)
            if result is not None:
                results.append(result)
    return results
