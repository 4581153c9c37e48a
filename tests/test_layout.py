import pytest

from src.keyboard.layout import (
    Layout, LayoutError, Point, Rect, describe_rows, get_layout, parse_layout,
)


def test_qwerty_geometry(layout):
    assert layout.centroid('q') == Point(30.0, 25.0)
    assert layout.centroid('a') == Point(60.0, 81.0)
    assert layout.centroid('s') == Point(126.0, 81.0)
    assert layout.centroid('z') == Point(126.0, 137.0)
    assert layout.get('h').rect == Rect(360.0, 56.0, 60.0, 50.0)
    assert layout.get('space').rect.w == 324.0
    assert layout.get('shift').is_special
    assert not layout.get('a').is_special


def test_centroid_is_case_insensitive(layout):
    assert layout.centroid('H') == layout.centroid('h')
    assert layout.centroid('?') is None


def test_find_key_inside_rect(layout):
    assert layout.find_key(Point(126, 81)).id == 's'
    # Inclusive edges: the first containing key in layout order wins
    assert layout.find_key(Point(156, 81)).id == 's'


def test_find_key_falls_back_to_nearest_centroid(layout):
    # Gap between s [96,156] and d [162,222]
    assert layout.find_key(Point(158, 81)).id == 's'
    assert layout.find_key(Point(160, 81)).id == 'd'


def test_find_key_equidistant_prefers_layout_order(layout):
    # 159 is exactly between the s and d centroids
    assert layout.find_key(Point(159, 81)).id == 's'


def test_find_key_max_distance(layout):
    far = Point(2000, 2000)
    assert layout.find_key(far) is not None
    assert layout.find_key(far, max_distance=100) is None


def test_clamp_to_bounds(layout):
    b = layout.bounds
    assert layout.clamp(Point(-50, -50)) == Point(b.x, b.y)
    assert layout.clamp(Point(5000, 5000)) == Point(b.x + b.w, b.y + b.h)
    inside = Point(100, 100)
    assert layout.clamp(inside) == inside


def test_empty_layout():
    empty = Layout()
    assert empty.is_empty
    assert empty.bounds is None
    assert empty.find_key(Point(0, 0)) is None
    assert empty.clamp(Point(3, 4)) == Point(3, 4)


def test_unknown_builtin_layout_is_empty():
    assert get_layout("nope").is_empty


def test_neighbors(layout):
    near = layout.neighbors('s', 90)
    assert 'a' in near and 'd' in near
    assert 'w' in near and 'z' in near
    assert 's' not in near
    assert 'p' not in near
    assert layout.neighbors('shift', 90) == []


def test_parse_layout_pixel_conversion():
    layout = parse_layout({
        'keyUnit': 60, 'keyHeight': 50, 'keySpacing': 6,
        'rows': [
            {'y': 0, 'offset': 0, 'keys': [{'code': 'A', 'x': 0}, {'code': 'b', 'x': 1}]},
            {'y': 1, 'offset': 0.5, 'keys': [{'code': 'wide', 'x': 0, 'w': 2, 'action': 'x'}]},
        ],
    })
    a, b, wide = layout.keys
    assert a.id == 'a'
    assert a.rect == Rect(0, 0, 60, 50)
    assert b.rect == Rect(66, 0, 60, 50)
    assert wide.rect == Rect(30, 56, 126, 50)
    assert wide.is_special


def test_parse_layout_defaults_bad_geometry():
    layout = parse_layout({'keyUnit': -1, 'rows': [{'keys': [{'code': 'x'}]}]})
    assert layout.get('x').rect == Rect(0, 0, 60, 50)


@pytest.mark.parametrize("description", [
    [],
    {'rows': 'abc'},
    {'rows': [{'keys': [{'label': 'no code'}]}]},
    {'rows': [{'keys': [{'code': 'a', 'x': 'left'}]}]},
])
def test_parse_layout_rejects_bad_descriptions(description):
    with pytest.raises(LayoutError):
        parse_layout(description)


def test_describe_rows_round_trip(layout):
    rebuilt = parse_layout(describe_rows([(0.0, ['q', 'w'])]))
    assert [k.id for k in rebuilt.keys] == ['q', 'w']
    assert rebuilt.get('w').centroid == layout.centroid('w')
