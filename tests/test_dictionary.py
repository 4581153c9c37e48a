import pytest

from src.prediction.dictionary import DictionaryIndex, parse_frequencies, rank_to_frequency


def test_shortlist_matches_end_points_and_length(dictionary):
    for seq in ["hello", "hlo", "ho", "tgis", "thst"]:
        for dw in dictionary.shortlist(seq, tolerance=3):
            assert dw.first_char == seq[0].lower()
            assert dw.last_char == seq[-1].lower()
            assert abs(dw.length - len(seq)) <= 3


def test_shortlist_contents(dictionary):
    words = {dw.word for dw in dictionary.shortlist("hlo", tolerance=3)}
    assert words == {"hello", "ho"}
    assert {dw.word for dw in dictionary.shortlist("hlo", tolerance=0)} == set()


def test_shortlist_is_case_insensitive(dictionary):
    assert [dw.word for dw in dictionary.shortlist("HI")] == ["hi"]


def test_shortlist_bad_input(dictionary):
    assert dictionary.shortlist("") == []
    assert dictionary.shortlist("h1") == []


def test_non_alpha_and_duplicate_entries_skipped():
    index = DictionaryIndex(["don't", "café", "  ok ", "ok", "", "x2", "Go"])
    assert [dw.word for dw in index.words] == ["ok", "Go"]
    assert index.bucket("g", "o")[0].first_char == "g"


def test_rank_format(dictionary):
    hi = dictionary.bucket("h", "i")[0]
    ho = dictionary.bucket("h", "o")[0]
    assert hi.frequency_rank == 1
    assert ho.frequency_rank == 50
    assert hi.frequency > ho.frequency
    home = [dw for dw in dictionary.bucket("h", "e") if dw.word == "home"][0]
    assert home.frequency_rank == 1000


def test_count_format():
    index = DictionaryIndex(["rare", "common", "never"], {"rare": 2, "common": 90},
                            frequency_format="count")
    by_word = {dw.word: dw for dw in index.words}
    assert by_word["common"].frequency_rank == 1
    assert by_word["rare"].frequency_rank == 2
    assert by_word["never"].frequency == 0.0
    assert by_word["common"].frequency == 90.0


def test_rank_to_frequency_is_decreasing():
    assert rank_to_frequency(1) == pytest.approx(500.0)
    assert rank_to_frequency(1) > rank_to_frequency(2) > rank_to_frequency(1000)


def test_empty_index():
    index = DictionaryIndex()
    assert index.is_empty
    assert len(index) == 0
    assert index.shortlist("hi") == []


def test_parse_frequencies_skips_bad_lines():
    freqs = parse_frequencies([
        "# comment",
        "",
        "the\t1",
        "and\t2.5",
        "broken line",
        "word\tnotanumber",
    ])
    assert freqs == {"the": 1.0, "and": 2.5}


def test_parse_frequencies_rejects_non_finite():
    freqs = parse_frequencies(["hi\tnan", "ho\tinf", "he\t-inf", "ha\t1e400", "the\t3"])
    assert freqs == {"the": 3.0}


def test_non_finite_values_in_mapping():
    index = DictionaryIndex(["hi", "ho"], {"hi": float("nan"), "ho": float("inf")}, default_rank=500)
    assert index.bucket("h", "i")[0].frequency_rank == 500
    assert index.bucket("h", "o")[0].frequency_rank == 500

    counts = DictionaryIndex(["hi", "ho"], {"hi": float("inf"), "ho": 10.0}, frequency_format="count")
    assert counts.bucket("h", "i")[0].frequency == 0.0
    assert counts.bucket("h", "o")[0].frequency_rank == 1
    assert counts.bucket("h", "i")[0].frequency_rank == 2
