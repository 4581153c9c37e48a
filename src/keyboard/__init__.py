"""
GlideType Keyboard Module

Layout model and swipe path to key-sequence mapping.
"""
from .layout import (
    Point, Rect, Key, Layout, LayoutError,
    parse_layout, describe_rows, get_layout, QWERTY,
)
from .mapper import (
    KeyTracker, KeySequenceMapper, map_path_to_sequence,
    remove_bounces, collapse, sequence_to_text,
)

__all__ = [
    'Point',
    'Rect',
    'Key',
    'Layout',
    'LayoutError',
    'parse_layout',
    'describe_rows',
    'get_layout',
    'QWERTY',
    'KeyTracker',
    'KeySequenceMapper',
    'map_path_to_sequence',
    'remove_bounces',
    'collapse',
    'sequence_to_text',
]
