"""
JSON-based project configuration for canonical_orient.

A single .orient.json file is used, the first one found among: an explicit
path, the dataset directory, the working directory and the home directory.
Settings missing from that file keep their dataclass defaults, and the CLI
overrides the logging level and JSON log file. Files are not layered;
merge_configs combines two loaded configurations when a caller wants that.

Example .orient.json:
{
    "transform": {
        "ap_key": "AP_orientation",
        "lr_key": "LR_orientation",
        "rounding_tolerance": 0.1,
        "degenerate_strategy": "axis_aligned"
    },
    "logging": {
        "level": "INFO",
        "json_file": null,
        "use_colors": true
    }
}

The configuration object is passed explicitly to the code that needs it;
nothing here writes module-level state.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from canonical_orient.orientation.rotation import DegenerateStrategy
from canonical_orient.orientation.vector import ZERO_THRESHOLD

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".orient.json"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TransformConfig:
    """Where the orientation strings live and how rotations are derived."""
    ap_key: str = "AP_orientation"
    lr_key: str = "LR_orientation"
    rounding_tolerance: float = ZERO_THRESHOLD
    degenerate_strategy: str = DegenerateStrategy.AXIS_ALIGNED.value

    def validate(self) -> None:
        """Raise ValueError on unusable settings."""
        if not self.ap_key or not self.lr_key:
            raise ValueError("Orientation keys must be non-empty")
        tolerance = self.rounding_tolerance
        if isinstance(tolerance, bool) or not isinstance(tolerance, (int, float)):
            raise ValueError(f"rounding_tolerance must be a number, got {tolerance!r}")
        if not 0.0 <= tolerance < 0.5:
            raise ValueError(f"rounding_tolerance must be in [0, 0.5), got {tolerance}")
        DegenerateStrategy(self.degenerate_strategy)

    @property
    def strategy(self) -> DegenerateStrategy:
        return DegenerateStrategy(self.degenerate_strategy)


@dataclass
class LoggingConfig:
    """Logging output configuration."""
    level: str = "INFO"
    json_file: Optional[str] = None
    use_colors: bool = True

    def validate(self) -> None:
        if str(self.level).upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    transform: TransformConfig = field(default_factory=TransformConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> 'ProjectConfig':
        self.transform.validate()
        self.logging.validate()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from dictionary.

        Unknown sections and keys are ignored; keys starting with "_" are
        treated as comments.

        Raises:
            ValueError: if a known setting has an unusable value
        """
        config = cls()
        for section in fields(cls):
            values = data.get(section.name)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section.name)
            for key, value in values.items():
                if key.startswith('_'):
                    continue
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.debug("Ignoring unknown setting %s.%s", section.name, key)
        return config.validate()

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
            ValueError: If a setting is invalid
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    dataset_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Return the first existing config file, or None.

    Candidates, in order: ``explicit_config``; .orient.json beside the
    dataset (in it, when ``dataset_path`` is a directory); .orient.json in
    the working directory; ~/.orient.json.
    """
    candidates = []
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)
    if dataset_path:
        dataset = Path(dataset_path)
        candidates.append((dataset if dataset.is_dir() else dataset.parent) / CONFIG_FILENAME)
    candidates += [Path.cwd() / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]

    return next((c for c in candidates if c.exists()), None)


def load_config(
    dataset_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults when no file is found
    or the file cannot be read.

    Raises:
        ValueError: if the file is readable but holds invalid settings
    """
    config_path = find_config_file(dataset_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations; only non-default values from ``override``
    are applied."""
    merged = ProjectConfig.from_dict(base.to_dict())
    defaults = ProjectConfig()

    for section in fields(ProjectConfig):
        default_section = getattr(defaults, section.name)
        merged_section = getattr(merged, section.name)
        for key, value in asdict(getattr(override, section.name)).items():
            if value != getattr(default_section, key):
                setattr(merged_section, key, value)

    return merged.validate()


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> None:
    """Create a sample configuration file with documentation."""
    sample = {
        "_comment": "Canonical orientation transform configuration",
        "_version": "1.0",
        "transform": {
            "_comment": "Keys of the two orientation strings and rotation derivation",
            **asdict(TransformConfig()),
        },
        "logging": {
            "_comment": "Log level, optional JSON log file, console colors",
            **asdict(LoggingConfig()),
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
