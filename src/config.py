"""
Config loader for GlideType.
Loads YAML configuration with dataclass validation.
"""
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional
import yaml

logger = logging.getLogger(__name__)


@dataclass
class GestureConfig:
    deadzone_radius: float = 10.0      # px of movement before a press can become a swipe
    time_threshold_ms: float = 35.0    # ms before a press can become a swipe
    smoothing_alpha: float = 0.40      # EMA weight of the raw sample (1 = no smoothing)
    resample_distance: float = 7.0     # Min px between appended path samples
    stationary_timeout_ms: float = 0.0 # Auto-complete a motionless swipe (0 = off)


@dataclass
class MappingConfig:
    hysteresis_ratio: float = 0.72     # New key must be this much closer to switch
    min_distance_gap: float = 6.0      # ...and closer by at least this many px
    min_consecutive_samples: int = 2   # Otherwise it must win this many samples in a row
    min_dwell_for_bounce: int = 2      # A-B-A with B dwell below this drops B
    noise_cutoff: float = 100.0        # Samples farther than this from every centroid are skipped (0 = off)


@dataclass
class PredictionConfig:
    strategy: str = "keys"             # "keys" or "template"
    length_tolerance: int = 3
    w_edit_distance: float = 2.2
    w_bigram_overlap: float = 1.0
    w_frequency: float = 0.8
    w_spatial: float = 1.5
    edit_distance_limit: int = 7
    spatial_norm_distance: float = 60.0  # Average px distance where spatial score hits 0
    min_score: float = -5.0
    max_candidates: int = 8
    min_sequence_length: int = 2
    frequency_format: str = "rank"     # "rank" (lower = more common) or "count"
    default_rank: int = 1000


@dataclass
class TemplateConfig:
    sample_points: int = 100
    shape_weight: float = 0.5
    location_weight: float = 0.5
    frequency_weight: float = 0.3
    pruning_radius: float = 40.0
    neighbor_radius: float = 90.0      # ~1.5 key widths
    min_pruned: int = 10               # Expand to neighbour keys below this many candidates
    length_tolerance: int = 3
    max_candidates: int = 8
    endpoint_bonus: float = 0.15
    length_bonus_per_char: float = 0.03
    max_length_bonus: float = 0.2


@dataclass
class KeyboardConfig:
    layout: str = "qwerty"


@dataclass
class DataConfig:
    search_paths: List[str] = field(default_factory=list)
    words_file: str = "dict/words.txt"
    freq_file: str = "dict/freq.tsv"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class Config:
    gestures: GestureConfig = field(default_factory=GestureConfig)
    mapping: MappingConfig = field(default_factory=MappingConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    templates: TemplateConfig = field(default_factory=TemplateConfig)
    keyboard: KeyboardConfig = field(default_factory=KeyboardConfig)
    data: DataConfig = field(default_factory=DataConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


STRATEGIES = ("keys", "template")
FREQUENCY_FORMATS = ("rank", "count")

# (section, field) -> (min, max)
_RANGES = {
    ('gestures', 'deadzone_radius'): (0.0, 50.0),
    ('gestures', 'time_threshold_ms'): (0.0, 1000.0),
    ('gestures', 'smoothing_alpha'): (0.0, 1.0),
    ('gestures', 'resample_distance'): (0.0, 100.0),
    ('gestures', 'stationary_timeout_ms'): (0.0, 10000.0),
    ('mapping', 'hysteresis_ratio'): (0.0, 1.0),
    ('mapping', 'min_distance_gap'): (0.0, 100.0),
    ('mapping', 'min_consecutive_samples'): (1, 20),
    ('mapping', 'min_dwell_for_bounce'): (1, 20),
    ('mapping', 'noise_cutoff'): (0.0, 1000.0),
    ('prediction', 'length_tolerance'): (0, 20),
    ('prediction', 'edit_distance_limit'): (0, 50),
    ('prediction', 'spatial_norm_distance'): (1.0, 1000.0),
    ('prediction', 'max_candidates'): (1, 100),
    ('prediction', 'min_sequence_length'): (1, 20),
    ('prediction', 'default_rank'): (1, 10_000_000),
    ('templates', 'sample_points'): (2, 1000),
    ('templates', 'pruning_radius'): (0.0, 1000.0),
    ('templates', 'neighbor_radius'): (0.0, 1000.0),
    ('templates', 'min_pruned'): (0, 10000),
    ('templates', 'length_tolerance'): (0, 20),
    ('templates', 'max_candidates'): (1, 100),
}


def _dict_to_dataclass(cls, data: dict):
    """Convert a dict to a dataclass, ignoring unknown keys."""
    if not isinstance(data, dict):
        return cls()
    field_names = {f.name for f in fields(cls)}
    filtered = {k: v for k, v in data.items() if k in field_names}
    return cls(**filtered)


def validate_config(config: Config) -> Config:
    """
    Clamp numeric settings into range and fix unknown enum values.
    Mutates and returns the config.
    """
    for (section_name, name), (low, high) in _RANGES.items():
        section = getattr(config, section_name)
        value = getattr(section, name)
        default = getattr(type(section)(), name)
        try:
            number = type(default)(value)
        except (TypeError, ValueError):
            logger.warning("Invalid %s.%s=%r, using %r", section_name, name, value, default)
            setattr(section, name, default)
            continue
        clamped = min(max(number, low), high)
        if clamped != value:
            logger.warning("Clamped %s.%s from %r to %r", section_name, name, value, clamped)
        setattr(section, name, clamped)

    if config.prediction.strategy not in STRATEGIES:
        logger.warning("Unknown strategy %r, using 'keys'", config.prediction.strategy)
        config.prediction.strategy = "keys"
    if config.prediction.frequency_format not in FREQUENCY_FORMATS:
        logger.warning("Unknown frequency format %r, using 'rank'",
                       config.prediction.frequency_format)
        config.prediction.frequency_format = "rank"
    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses config.yaml
                    in project root.

    Returns:
        Config dataclass with all settings. Missing or unreadable files
        yield defaults.
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        return Config()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.error("Could not read config %s: %s", config_path, e)
        return Config()

    if not isinstance(data, dict):
        logger.error("Config %s is not a mapping, using defaults", config_path)
        return Config()

    config = Config(
        gestures=_dict_to_dataclass(GestureConfig, data.get('gestures')),
        mapping=_dict_to_dataclass(MappingConfig, data.get('mapping')),
        prediction=_dict_to_dataclass(PredictionConfig, data.get('prediction')),
        templates=_dict_to_dataclass(TemplateConfig, data.get('templates')),
        keyboard=_dict_to_dataclass(KeyboardConfig, data.get('keyboard')),
        data=_dict_to_dataclass(DataConfig, data.get('data')),
        logging=_dict_to_dataclass(LoggingConfig, data.get('logging')),
    )
    return validate_config(config)
