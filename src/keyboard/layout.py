"""
Keyboard layout model.
Builds absolute key rectangles and centroids from a grid-unit layout description.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


# Grid geometry defaults (pixels)
KEY_UNIT = 60.0
KEY_HEIGHT = 50.0
KEY_SPACING = 6.0

# Row definitions: (offset in grid units, keys).
# Each key is a string (letter) or (code, width_multiplier, is_special).
QWERTY = [
    (0.0, ['q', 'w', 'e', 'r', 't', 'y', 'u', 'i', 'o', 'p']),
    (0.5, ['a', 's', 'd', 'f', 'g', 'h', 'j', 'k', 'l', ('enter', 1.0, True)]),
    (0.0, [('shift', 1.5, True), 'z', 'x', 'c', 'v', 'b', 'n', 'm', ('backspace', 1.5, True)]),
    (1.5, [(',', 1.0, False), ('space', 5.0, True), ('.', 1.0, False)]),
]

LAYOUTS: Dict[str, List[Tuple[float, List[object]]]] = {
    'qwerty': QWERTY,
}


class LayoutError(ValueError):
    """Raised when a layout description cannot be turned into keys."""


@dataclass(frozen=True)
class Point:
    """2D location in layout space."""
    x: float
    y: float

    def distance_squared_to(self, other: 'Point') -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def distance_to(self, other: 'Point') -> float:
        return math.sqrt(self.distance_squared_to(other))


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    def contains(self, p: Point) -> bool:
        # Edges are inclusive
        return self.x <= p.x <= self.x + self.w and self.y <= p.y <= self.y + self.h

    @property
    def center(self) -> Point:
        return Point(self.x + self.w / 2.0, self.y + self.h / 2.0)


@dataclass(frozen=True)
class Key:
    """A fixed keyboard key."""
    id: str
    rect: Rect
    centroid: Point
    label: str = ""
    is_special: bool = False

    @property
    def is_alpha(self) -> bool:
        return len(self.id) == 1 and self.id.isascii() and self.id.isalpha()


@dataclass
class Layout:
    """
    Read-only key set.

    Keys keep the order of the layout description (rows top to bottom,
    keys left to right). All lookups resolve ties by that order: the first
    containing rectangle wins, and among equidistant centroids the earlier
    key wins.
    """
    keys: List[Key] = field(default_factory=list)
    name: str = ""

    def __post_init__(self):
        self._by_id: Dict[str, Key] = {}
        for key in self.keys:
            self._by_id.setdefault(key.id, key)
        self._neighbors: Dict[Tuple[str, float], List[str]] = {}

    def __len__(self) -> int:
        return len(self.keys)

    @property
    def is_empty(self) -> bool:
        return not self.keys

    @property
    def bounds(self) -> Optional[Rect]:
        """Union of all key rectangles, or None for an empty layout."""
        if not self.keys:
            return None
        left = min(k.rect.x for k in self.keys)
        top = min(k.rect.y for k in self.keys)
        right = max(k.rect.x + k.rect.w for k in self.keys)
        bottom = max(k.rect.y + k.rect.h for k in self.keys)
        return Rect(left, top, right - left, bottom - top)

    def get(self, key_id: str) -> Optional[Key]:
        return self._by_id.get(key_id)

    def centroid(self, char: str) -> Optional[Point]:
        """Centroid of the key for a character (case-insensitive)."""
        key = self._by_id.get(char.lower())
        return key.centroid if key else None

    def clamp(self, p: Point) -> Point:
        """Clamp a point to the nearest edge of the keyboard bounds."""
        b = self.bounds
        if b is None:
            return p
        return Point(min(max(p.x, b.x), b.x + b.w), min(max(p.y, b.y), b.y + b.h))

    def key_containing(self, p: Point) -> Optional[Key]:
        for key in self.keys:
            if key.rect.contains(p):
                return key
        return None

    def nearest_centroid(self, p: Point) -> Tuple[Optional[Key], float]:
        """Return (key, squared distance) of the closest centroid."""
        best = None
        best_d2 = math.inf
        for key in self.keys:
            d2 = p.distance_squared_to(key.centroid)
            if d2 < best_d2:
                best_d2 = d2
                best = key
        return best, best_d2

    def find_key(self, p: Point, max_distance: Optional[float] = None) -> Optional[Key]:
        """
        Resolve the key under a point.

        Args:
            p: Point in layout space
            max_distance: If set, a point farther than this from every
                centroid (and outside every rectangle) resolves to None.

        Returns:
            The containing key if any, else the nearest-centroid key.
        """
        key = self.key_containing(p)
        if key is not None:
            return key
        key, d2 = self.nearest_centroid(p)
        if key is None:
            return None
        if max_distance is not None and max_distance > 0 and d2 > max_distance * max_distance:
            return None
        return key

    def neighbors(self, char: str, radius: float) -> List[str]:
        """Alphabetic keys whose centroids lie within radius of char's key."""
        cache_key = (char.lower(), radius)
        if cache_key in self._neighbors:
            return self._neighbors[cache_key]

        result = []
        origin = self._by_id.get(char.lower())
        if origin is not None and origin.is_alpha:
            for other in self.keys:
                if not other.is_alpha or other.id == origin.id:
                    continue
                if origin.centroid.distance_to(other.centroid) < radius:
                    result.append(other.id)
        self._neighbors[cache_key] = result
        return result


def parse_layout(description: dict, name: str = "") -> Layout:
    """
    Convert a layout description into absolute key rectangles.

    The description carries `keyUnit`, `keyHeight`, `keySpacing` and a list
    of `rows`, each with a row index `y`, an `offset` in grid units and
    `keys` holding `code`, `label`, `x`, `w` and `special`.

    Raises:
        LayoutError: If the description is structurally invalid.
    """
    if not isinstance(description, dict):
        raise LayoutError("layout description must be an object")

    unit = _positive(description.get('keyUnit'), KEY_UNIT)
    height = _positive(description.get('keyHeight'), KEY_HEIGHT)
    spacing = description.get('keySpacing', KEY_SPACING)
    if not isinstance(spacing, (int, float)) or spacing < 0:
        spacing = KEY_SPACING

    rows = description.get('rows')
    if not isinstance(rows, list):
        raise LayoutError("layout description has no 'rows' list")

    keys: List[Key] = []
    for row_idx, row in enumerate(rows):
        if not isinstance(row, dict) or not isinstance(row.get('keys'), list):
            raise LayoutError(f"row {row_idx} has no 'keys' list")
        try:
            row_y = int(row.get('y', row_idx))
            offset = float(row.get('offset', 0.0))
        except (TypeError, ValueError) as e:
            raise LayoutError(f"row {row_idx}: {e}") from e

        for key_data in row['keys']:
            code = key_data.get('code') if isinstance(key_data, dict) else None
            if not code:
                raise LayoutError(f"row {row_idx} has a key without 'code'")
            try:
                kx = float(key_data.get('x', 0.0)) + offset
                kw = float(key_data.get('w', 1.0))
            except (TypeError, ValueError) as e:
                raise LayoutError(f"key {code!r}: {e}") from e
            if kw <= 0:
                kw = 1.0

            # Grid units to pixels; spacing accumulates once per whole unit
            x = kx * unit + (int(kx) * spacing if kx > 0 else 0.0)
            y = row_y * (height + spacing)
            w = kw * unit + ((kw - 1) * spacing if kw > 1 else 0.0)
            rect = Rect(x, y, w, height)

            code = str(code)
            keys.append(Key(
                id=code.lower() if len(code) == 1 else code,
                rect=rect,
                centroid=rect.center,
                label=str(key_data.get('label', code.upper())),
                is_special=bool(key_data.get('special') or key_data.get('action')),
            ))

    return Layout(keys=keys, name=name)


def describe_rows(rows: List[Tuple[float, List[object]]],
                  unit: float = KEY_UNIT,
                  height: float = KEY_HEIGHT,
                  spacing: float = KEY_SPACING) -> dict:
    """Turn compact row definitions into a layout description."""
    described_rows = []
    for row_idx, (offset, row) in enumerate(rows):
        current_x = 0.0
        row_keys = []
        for key in row:
            code = key[0] if isinstance(key, tuple) else key
            width = key[1] if isinstance(key, tuple) else 1.0
            special = key[2] if isinstance(key, tuple) else False
            row_keys.append({
                'code': code,
                'label': code.upper(),
                'x': current_x,
                'w': width,
                'special': special,
            })
            current_x += width
        described_rows.append({'y': row_idx, 'offset': offset, 'keys': row_keys})

    return {
        'keyUnit': unit,
        'keyHeight': height,
        'keySpacing': spacing,
        'rows': described_rows,
    }


def get_layout(name: str) -> Layout:
    """Get a built-in layout by name (empty layout if unknown)."""
    rows = LAYOUTS.get(name.lower())
    if rows is None:
        return Layout(name=name)
    return parse_layout(describe_rows(rows), name=name.lower())


def _positive(value, default: float) -> float:
    if isinstance(value, (int, float)) and value > 0:
        return float(value)
    return default
