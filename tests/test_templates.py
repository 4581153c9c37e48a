import numpy as np
import pytest

from src.config import TemplateConfig
from src.keyboard.layout import Layout
from src.prediction.recognizer import RecognitionRequest
from src.prediction.templates import (
    TemplateRecognizer, normalize_shape, rank_score, resample,
)


@pytest.fixture
def recognizer(layout, dictionary):
    return TemplateRecognizer(layout, dictionary, TemplateConfig())


def word_path(layout, word):
    return [layout.centroid(c) for c in word]


def test_resample_even_spacing():
    points = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
    sampled = resample(points, 5)
    assert sampled.shape == (5, 2)
    steps = np.linalg.norm(np.diff(sampled, axis=0), axis=1)
    assert np.allclose(steps, 5.0)
    assert np.allclose(sampled[0], [0, 0])
    assert np.allclose(sampled[-1], [10, 10])


def test_resample_degenerate_input():
    assert resample(np.zeros((0, 2)), 4).shape == (0, 2)
    same = resample(np.array([[3.0, 4.0], [3.0, 4.0]]), 4)
    assert np.allclose(same, [[3, 4]] * 4)


def test_normalize_shape_unit_radius():
    shape = normalize_shape(np.array([[10.0, 10.0], [30.0, 10.0]]))
    assert np.allclose(shape.mean(axis=0), [0, 0])
    assert np.linalg.norm(shape, axis=1).max() == pytest.approx(1.0)


def test_rank_score_decreases():
    assert rank_score(1) == pytest.approx(1.0)
    assert rank_score(1) > rank_score(10) > rank_score(1000)


def test_templates_built_for_multi_letter_words(recognizer, dictionary):
    assert recognizer.template("hello") is not None
    assert recognizer.template("hello").sampled.shape == (100, 2)
    assert len(recognizer) == len(dictionary)


def test_exact_path_ranks_word_first(recognizer, layout):
    path = word_path(layout, "hello")
    result = recognizer.recognize(RecognitionRequest(key_sequence="hello", path=path))
    assert result[0].word == "hello"
    assert result[0].breakdown['location_distance'] == pytest.approx(0.0, abs=1e-6)
    assert recognizer.last_shortlist_size >= 1


def test_key_sequence_only(recognizer):
    result = recognizer.recognize(RecognitionRequest(key_sequence="this"))
    assert result[0].word == "this"


def test_prune_expands_to_neighbours(recognizer, layout):
    # Start on g: nothing in the dictionary starts with g, h is a neighbour
    pruned = recognizer.prune(layout.centroid('g'), layout.centroid('o'), 5)
    assert "hello" in {t.entry.word for t in pruned}


def test_no_result_for_short_input(recognizer, layout):
    assert recognizer.recognize(RecognitionRequest()) == []
    assert recognizer.recognize(RecognitionRequest(path=[layout.centroid('h')])) == []


def test_empty_layout(layout, dictionary):
    recognizer = TemplateRecognizer(Layout(), dictionary)
    assert len(recognizer) == 0
    assert recognizer.recognize(RecognitionRequest(key_sequence="hi")) == []
    recognizer.update_layout(layout)
    assert recognizer.template("hi") is not None
