"""Configuration models using simple dataclasses."""

import dataclasses
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml

from .formatter import DEFAULT_FORMAT
from .search.candidates import DEFAULT_SEPARATOR, FIELDS
from .search.fuzzy_matcher import FOLD, STRATEGIES
from .search.selector import DEFAULT_FZF_ARGS

logger = logging.getLogger(__name__)

# matching through the external selector rather than in-process ranking
FZF_STRATEGY = "fzf"


@dataclass
class DatabaseConfig:
    """SQLite store settings."""

    # empty means "<playlist title>.sqlite" for ingestion
    path: str = ""
    connection_pool_size: int = 2
    connection_timeout: float = 30.0
    max_retries: int = 3


@dataclass
class IngestConfig:
    """Playlist download settings."""

    timeout_seconds: int = 60
    max_retries: int = 3
    strict_validation: bool = False
    output_directory: str = "."


@dataclass
class FuzzyMatchingConfig:
    """Fuzzy matching configuration."""

    min_similarity: float = 0.7


@dataclass
class SearchConfig:
    """Search defaults for the list and pick commands."""

    strategy: str = FOLD
    # shadows dataclasses.field for the rest of this class body
    field: str = "all"
    separator: str = DEFAULT_SEPARATOR
    fzf_command: str = "fzf"
    fzf_args: List[str] = dataclasses.field(default_factory=lambda: list(DEFAULT_FZF_ARGS))
    fuzzy_matching: FuzzyMatchingConfig = dataclasses.field(default_factory=FuzzyMatchingConfig)


@dataclass
class OutputConfig:
    """How results are printed."""

    format: str = DEFAULT_FORMAT
    page_size: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    # empty disables the log file
    file_path: str = ""
    max_file_size_mb: int = 50
    backup_count: int = 5
    console_output: bool = True


@dataclass
class UIConfig:
    """User interface configuration."""

    show_progress_bar: bool = True


@dataclass
class PlsConfig:
    """Main configuration model."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def _filter_fields(data: Dict[str, Any], cls: Type[Any]) -> Dict[str, Any]:
    """Return only keys present on the dataclass to avoid TypeErrors."""
    valid_fields = cls.__dataclass_fields__.keys()
    return {k: v for k, v in data.items() if k in valid_fields}


def validate_config(cfg: PlsConfig) -> None:
    """Bounds checking of every configuration value."""
    if not (1 <= cfg.database.connection_pool_size <= 20):
        raise ValueError("database.connection_pool_size must be between 1 and 20")
    if not (0 < cfg.database.connection_timeout <= 600):
        raise ValueError("database.connection_timeout must be between 0 and 600 seconds")
    if not (1 <= cfg.database.max_retries <= 10):
        raise ValueError("database.max_retries must be between 1 and 10")

    if not (1 <= cfg.ingest.timeout_seconds <= 3600):
        raise ValueError("ingest.timeout_seconds must be between 1 and 3600")
    if not (1 <= cfg.ingest.max_retries <= 10):
        raise ValueError("ingest.max_retries must be between 1 and 10")

    valid_strategies = list(STRATEGIES) + [FZF_STRATEGY]
    if cfg.search.strategy not in valid_strategies:
        raise ValueError(f"search.strategy must be one of: {valid_strategies}")
    if cfg.search.field not in FIELDS:
        raise ValueError(f"search.field must be one of: {list(FIELDS)}")
    if not cfg.search.fzf_command:
        raise ValueError("search.fzf_command cannot be empty")
    if not (0.1 <= cfg.search.fuzzy_matching.min_similarity <= 1.0):
        raise ValueError("fuzzy_matching.min_similarity must be between 0.1 and 1.0")

    if not cfg.output.format:
        raise ValueError("output.format cannot be empty")
    if not (1 <= cfg.output.page_size <= 500):
        raise ValueError("output.page_size must be between 1 and 500")

    if not (1 <= cfg.logging.max_file_size_mb <= 1000):  # 1MB to 1GB
        raise ValueError("max_file_size_mb must be between 1 and 1000 MB")
    if not (0 <= cfg.logging.backup_count <= 100):
        raise ValueError("backup_count must be between 0 and 100")

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if cfg.logging.level.upper() not in valid_levels:
        raise ValueError(f"logging.level must be one of: {valid_levels}")


def load_config(config_path: Optional[str] = None) -> PlsConfig:
    """Load configuration from YAML file or return defaults."""
    if not (config_path and Path(config_path).exists()):
        cfg = PlsConfig()
        validate_config(cfg)
        return cfg

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
    except (IOError, OSError) as e:
        raise ValueError(f"Cannot read configuration file {config_path}: {e}")

    if config_data is None:
        logger.warning(f"Configuration file {config_path} is empty, using defaults")
        config_data = {}
    elif not isinstance(config_data, dict):
        raise ValueError(
            f"Configuration file must contain a dictionary, got {type(config_data).__name__}"
        )

    try:
        search_data = dict(config_data.get("search") or {})
        fuzzy_data = search_data.pop("fuzzy_matching", None) or {}
        fuzzy_config = FuzzyMatchingConfig(**_filter_fields(fuzzy_data, FuzzyMatchingConfig))

        cfg = PlsConfig(
            database=DatabaseConfig(
                **_filter_fields(config_data.get("database") or {}, DatabaseConfig)
            ),
            ingest=IngestConfig(**_filter_fields(config_data.get("ingest") or {}, IngestConfig)),
            search=SearchConfig(
                **_filter_fields(search_data, SearchConfig), fuzzy_matching=fuzzy_config
            ),
            output=OutputConfig(**_filter_fields(config_data.get("output") or {}, OutputConfig)),
            logging=LoggingConfig(
                **_filter_fields(config_data.get("logging") or {}, LoggingConfig)
            ),
            ui=UIConfig(**_filter_fields(config_data.get("ui") or {}, UIConfig)),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"Invalid configuration values in {config_path}: {e}")

    try:
        validate_config(cfg)
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid configuration value types in {config_path}: {e}")
    return cfg


def save_config_template(output_path: str = "pls.yaml") -> None:
    """Save a template configuration file."""
    config_dict = asdict(PlsConfig())

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2, sort_keys=False)

    logger.info(f"Configuration template saved to: {output_path}")
