"""
Dictionary index for swipe prediction.
Words are bucketed by (first letter, last letter) so a key sequence only
ever looks at the words that can match its end points.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ALPHABET_SIZE = 26
RANK_SCALE = 1000.0


@dataclass(frozen=True)
class DictWord:
    word: str
    frequency_rank: int   # Lower is more common
    frequency: float      # Higher is more common
    first_char: str
    last_char: str
    length: int


def is_indexable(word: str) -> bool:
    return bool(word) and word.isascii() and word.isalpha()


def rank_to_frequency(rank: float) -> float:
    """Map a frequency rank onto an increasing frequency value."""
    return RANK_SCALE / (max(rank, 0) + 1.0)


class DictionaryIndex:
    """
    Word list plus frequencies, indexed into 26x26 buckets.
    Read-only after construction.
    """

    def __init__(self, words: Iterable[str] = (),
                 frequencies: Optional[Mapping[str, float]] = None,
                 frequency_format: str = "rank",
                 default_rank: int = 1000):
        """
        Build the index.

        Args:
            words: Candidate words; entries that are not purely a-z/A-Z are skipped
            frequencies: word -> rank ("rank" format) or word -> count ("count" format)
            frequency_format: How to read the frequency values
            default_rank: Rank for words absent from a rank table
        """
        self._words: List[DictWord] = []
        self._buckets: List[List[List[int]]] = [
            [[] for _ in range(ALPHABET_SIZE)] for _ in range(ALPHABET_SIZE)
        ]
        self._build(words, frequencies or {}, frequency_format, default_rank)

    def __len__(self) -> int:
        return len(self._words)

    @property
    def is_empty(self) -> bool:
        return not self._words

    @property
    def words(self) -> List[DictWord]:
        return list(self._words)

    def bucket(self, first: str, last: str) -> List[DictWord]:
        idx = _bucket_index(first, last)
        if idx is None:
            return []
        return [self._words[i] for i in self._buckets[idx[0]][idx[1]]]

    def shortlist(self, key_sequence: str, tolerance: int = 3) -> List[DictWord]:
        """
        Words sharing the sequence's first and last letter whose length is
        within tolerance of the sequence length.
        """
        if not key_sequence:
            return []
        idx = _bucket_index(key_sequence[0], key_sequence[-1])
        if idx is None:
            return []
        target = len(key_sequence)
        return [
            self._words[i] for i in self._buckets[idx[0]][idx[1]]
            if abs(self._words[i].length - target) <= tolerance
        ]

    def _build(self, words: Iterable[str], frequencies: Mapping[str, float],
               frequency_format: str, default_rank: int):
        seen = set()
        entries: List[Tuple[str, float]] = []
        skipped = 0
        for raw in words:
            word = raw.strip()
            if not is_indexable(word):
                if word:
                    skipped += 1
                continue
            if word in seen:
                continue
            seen.add(word)
            entries.append((word, frequencies.get(word)))

        if frequency_format == "count":
            ranks = _ranks_from_counts(entries)
        else:
            ranks = {}

        for word, value in entries:
            if frequency_format == "count":
                count = _finite(value)
                rank = ranks[word]
                frequency = max(count, 0.0)
            else:
                if value is None or not math.isfinite(value):
                    rank = default_rank
                else:
                    rank = int(value)
                frequency = rank_to_frequency(rank)

            lower = word.lower()
            dw = DictWord(
                word=word,
                frequency_rank=rank,
                frequency=frequency,
                first_char=lower[0],
                last_char=lower[-1],
                length=len(word),
            )
            fi, li = _bucket_index(dw.first_char, dw.last_char)
            self._buckets[fi][li].append(len(self._words))
            self._words.append(dw)

        if skipped:
            logger.debug("Skipped %d non-alphabetic entries", skipped)


def _bucket_index(first: str, last: str) -> Optional[Tuple[int, int]]:
    fi = ord(first.lower()) - ord('a')
    li = ord(last.lower()) - ord('a')
    if 0 <= fi < ALPHABET_SIZE and 0 <= li < ALPHABET_SIZE:
        return fi, li
    return None


def _ranks_from_counts(entries: List[Tuple[str, Optional[float]]]) -> Dict[str, int]:
    # Higher count = better rank; ties keep word-list order
    order = sorted(range(len(entries)), key=lambda i: -_finite(entries[i][1]))
    return {entries[i][0]: pos + 1 for pos, i in enumerate(order)}


def parse_frequencies(lines: Iterable[str]) -> Dict[str, float]:
    """
    Parse tab-separated `word<TAB>value` lines.
    Malformed lines are skipped.
    """
    freqs: Dict[str, float] = {}
    bad = 0
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        parts = line.split('\t')
        if len(parts) < 2:
            bad += 1
            continue
        try:
            value = float(parts[1])
        except ValueError:
            bad += 1
            continue
        # nan, inf and overflowing literals like 1e400
        if not math.isfinite(value):
            bad += 1
            continue
        freqs[parts[0].strip()] = value
    if bad:
        logger.warning("Skipped %d malformed frequency lines", bad)
    return freqs


def _finite(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)
