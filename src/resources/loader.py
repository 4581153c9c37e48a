"""
Layout and dictionary loading.

Data files are looked up in order: configured extra paths, the project's
data/ directory, the user data directory, then system directories. The
first hit wins. Anything missing or unreadable degrades to an empty
structure so recognition returns no candidates instead of failing.
"""
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from src.config import DataConfig, PredictionConfig
from src.keyboard.layout import LAYOUTS, Layout, LayoutError, get_layout, parse_layout
from src.prediction.dictionary import DictionaryIndex, parse_frequencies

logger = logging.getLogger(__name__)

APP_DIR = "glidetype"
PROJECT_DATA = Path(__file__).parent.parent.parent / "data"


def user_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_DIR
    return Path.home() / ".local" / "share" / APP_DIR


def default_search_paths() -> List[Path]:
    return [
        PROJECT_DATA,
        user_data_dir(),
        Path("/usr/local/share") / APP_DIR,
        Path("/usr/share") / APP_DIR,
    ]


class ResourceLoader:
    """Resolves and parses layout and dictionary files."""

    def __init__(self, search_paths: Optional[Iterable[Path]] = None,
                 data_config: Optional[DataConfig] = None):
        self._data_config = data_config or DataConfig()
        extra = [Path(p).expanduser() for p in self._data_config.search_paths]
        base = list(search_paths) if search_paths is not None else default_search_paths()
        self._search_paths = extra + [Path(p) for p in base]

    @property
    def search_paths(self) -> List[Path]:
        return list(self._search_paths)

    def find(self, relative: str) -> Optional[Path]:
        """First existing file for a relative path, or None."""
        rel = Path(relative)
        if rel.is_absolute():
            return rel if rel.is_file() else None
        for base in self._search_paths:
            candidate = base / rel
            if candidate.is_file():
                return candidate
        return None

    def load_layout(self, name: str) -> Layout:
        """
        Load `layouts/<name>.json`, falling back to a built-in layout of the
        same name. Returns an empty layout if neither is usable.
        """
        path = self.find(f"layouts/{name}.json")
        if path is not None:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    description = json.load(f)
                layout = parse_layout(description, name=name)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, LayoutError) as e:
                logger.warning("Could not load layout %s: %s", path, e)
                return Layout(name=name)
            logger.info("Loaded layout '%s' from %s (%d keys)", name, path, len(layout))
            return layout

        if name.lower() in LAYOUTS:
            layout = get_layout(name)
            logger.info("Using built-in layout '%s' (%d keys)", name, len(layout))
            return layout

        logger.warning("Layout '%s' not found in %s", name,
                       ", ".join(str(p) for p in self._search_paths))
        return Layout(name=name)

    def load_dictionary(self, prediction: Optional[PredictionConfig] = None) -> DictionaryIndex:
        """Load the word list and optional frequency table."""
        prediction = prediction or PredictionConfig()
        words_path = self.find(self._data_config.words_file)
        if words_path is None:
            logger.warning("Word list '%s' not found", self._data_config.words_file)
            return DictionaryIndex()

        try:
            words = self._read_lines(words_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read word list %s: %s", words_path, e)
            return DictionaryIndex()

        frequencies = {}
        freq_path = self.find(self._data_config.freq_file)
        if freq_path is not None:
            try:
                frequencies = parse_frequencies(self._read_lines(freq_path))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read frequencies %s: %s", freq_path, e)
        else:
            logger.debug("No frequency table '%s', using default ranks", self._data_config.freq_file)

        index = DictionaryIndex(
            words,
            frequencies,
            frequency_format=prediction.frequency_format,
            default_rank=prediction.default_rank,
        )
        logger.info("Loaded %d words from %s (%d frequencies)", len(index), words_path, len(frequencies))
        return index

    @staticmethod
    def _read_lines(path: Path) -> List[str]:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read().splitlines()
