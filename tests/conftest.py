import pytest

from src.config import Config
from src.keyboard.layout import Point, get_layout
from src.prediction.dictionary import DictionaryIndex

WORDS = ["hi", "ho", "hello", "help", "held", "hole", "home", "the", "this", "that", "test"]
RANKS = {"hi": 1, "ho": 50, "hello": 20, "help": 30, "the": 1, "this": 5, "that": 4}


@pytest.fixture
def layout():
    return get_layout("qwerty")


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def dictionary():
    return DictionaryIndex(WORDS, RANKS)


def center(layout, key_id):
    key = layout.get(key_id)
    return key.centroid


def line(a, b, steps):
    """Points from a to b inclusive."""
    return [Point(a.x + (b.x - a.x) * i / steps, a.y + (b.y - a.y) * i / steps)
            for i in range(steps + 1)]
