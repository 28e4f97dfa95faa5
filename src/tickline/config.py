"""Configuration file management for tickline.

This module provides the timeline resolution and default musical
settings, plus loading and saving of the JSON configuration file that
can override them.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# Current config file version
CONFIG_VERSION = 1

# Ticks per quarter note
DEFAULT_TPQN = 480
DEFAULT_BPM = 120.0
DEFAULT_TIME_SIGNATURE = (4, 4)

CONFIG_FILENAME = "tickline.json"


def check_ticks_per_quarter_note(value: int) -> None:
    """Raise ValidationError unless the resolution is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(
            f"ticks_per_quarter_note must be a positive integer, got {value!r}"
        )


def check_default_bpm(value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"default_bpm must be positive, got {value}")


def check_default_time_signature(value: tuple[int, int]) -> None:
    numerator, denominator = value
    if any(isinstance(v, bool) or not isinstance(v, int) for v in value):
        raise ValidationError(f"Invalid default time signature {numerator}/{denominator}")
    if numerator < 1 or denominator < 1 or denominator & (denominator - 1):
        raise ValidationError(f"Invalid default time signature {numerator}/{denominator}")


@dataclass
class TimelineConfig:
    """Configuration stored in a tickline.json file.

    Attributes:
        version: Config file format version.
        ticks_per_quarter_note: Timeline resolution (TPQN).
        default_bpm: Tempo used when a project has no tempo events.
        default_time_signature: (numerator, denominator) used when a
            project has no time signature events.
    """

    version: int = CONFIG_VERSION
    ticks_per_quarter_note: int = DEFAULT_TPQN
    default_bpm: float = DEFAULT_BPM
    default_time_signature: tuple[int, int] = DEFAULT_TIME_SIGNATURE

    def __post_init__(self) -> None:
        check_ticks_per_quarter_note(self.ticks_per_quarter_note)
        check_default_bpm(self.default_bpm)
        check_default_time_signature(self.default_time_signature)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "ticks_per_quarter_note": self.ticks_per_quarter_note,
            "default_bpm": self.default_bpm,
            "default_time_signature": list(self.default_time_signature),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimelineConfig:
        """Create from dictionary (parsed JSON).

        Args:
            data: Dictionary from parsed JSON.

        Returns:
            TimelineConfig instance.

        Raises:
            TypeError: If data is not a dictionary.
            ValidationError: If a value is out of range.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict, got {type(data).__name__}")
        numerator, denominator = data.get("default_time_signature", DEFAULT_TIME_SIGNATURE)
        return cls(
            version=data.get("version", CONFIG_VERSION),
            ticks_per_quarter_note=int(data.get("ticks_per_quarter_note", DEFAULT_TPQN)),
            default_bpm=float(data.get("default_bpm", DEFAULT_BPM)),
            default_time_signature=(int(numerator), int(denominator)),
        )


def get_config_path(directory: Path) -> Path:
    """Get the config file path for a project directory.

    Args:
        directory: Directory holding the project file.

    Returns:
        Path to the tickline.json file in that directory.
    """
    return directory / CONFIG_FILENAME


def load_config(path: Path) -> TimelineConfig | None:
    """Load config from a JSON file if it exists.

    Args:
        path: Path to the config file.

    Returns:
        TimelineConfig if the file exists and is valid, None otherwise.
    """
    if not path.exists():
        logger.debug("No config file found at %s", path)
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        config = TimelineConfig.from_dict(data)
        logger.info("Loaded config from %s", path)
        return config
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Failed to parse config file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return None


def save_config(path: Path, config: TimelineConfig) -> bool:
    """Save config to a JSON file.

    Args:
        path: Path to the config file.
        config: Configuration to save.

    Returns:
        True if saved successfully, False otherwise.
    """
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
        logger.info("Saved config to %s", path)
        return True
    except OSError as e:
        logger.warning("Failed to write config file %s: %s", path, e)
        return False
