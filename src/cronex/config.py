"""Configuration for the next-occurrence engine.

Configuration can be built directly, taken from environment variables or
loaded from a YAML/JSON file:

    >>> from cronex.config import IteratorConfig, load_config
    >>>
    >>> config = IteratorConfig(max_invalid_dates=200)
    >>> config = IteratorConfig.from_env()          # CRONEX_MAX_INVALID_DATES, ...
    >>> config = load_config("config/cronex.yaml")  # optional "cronex:" section
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from cronex.errors import CronError


MIN_YEAR = 1
MAX_YEAR = 9999

# Wednesday on the 29th of February, searched from year 1, needs around 40
# rejected candidates.
DEFAULT_MAX_INVALID_DATES = 100

ENV_PREFIX = "CRONEX_"


class ConfigError(CronError):
    """Configuration could not be loaded."""

    pass


@dataclass(frozen=True)
class IteratorConfig:
    """Configuration for cron iterators.

    Attributes:
        max_invalid_dates: Number of invalid calendar dates tolerated while
            searching for the next occurrence before the specification is
            declared unsatisfiable.
        min_year: First supported year.
        max_year: Last supported year. Enumeration ends past this year.
    """

    max_invalid_dates: int = DEFAULT_MAX_INVALID_DATES
    min_year: int = MIN_YEAR
    max_year: int = MAX_YEAR

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_invalid_dates < 1:
            raise ValueError("max_invalid_dates must be at least 1")
        if not MIN_YEAR <= self.min_year <= self.max_year <= MAX_YEAR:
            raise ValueError(
                f"Year window must satisfy {MIN_YEAR} <= min_year <= max_year <= {MAX_YEAR}"
            )

    def contains_year(self, year: int) -> bool:
        return self.min_year <= year <= self.max_year

    @classmethod
    def default(cls) -> "IteratorConfig":
        return cls()

    @classmethod
    def strict(cls) -> "IteratorConfig":
        """Small budget, enough for the worst known satisfiable schedules."""
        return cls(max_invalid_dates=40)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IteratorConfig":
        """Create configuration from a mapping.

        Raises:
            ConfigError: On unknown keys or non-integer values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values: dict[str, int] = {}
        for key, value in data.items():
            values[key] = _to_int(key, value)
        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "IteratorConfig":
        """Create configuration from environment variables.

        Reads ``{prefix}MAX_INVALID_DATES``, ``{prefix}MIN_YEAR`` and
        ``{prefix}MAX_YEAR``; missing variables keep their defaults.
        """
        data: dict[str, Any] = {}
        for f in fields(cls):
            value = os.getenv(f"{prefix}{f.name.upper()}")
            if value is not None and value.strip():
                data[f.name] = value.strip()
        return cls.from_dict(data)


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def load_config(path: str | Path, section: str = "cronex") -> IteratorConfig:
    """Load iterator configuration from a YAML or JSON file.

    Settings may be at the top level or nested under ``section``.

    Args:
        path: File path (.yaml, .yml or .json).
        section: Optional top-level key holding the settings.

    Returns:
        Loaded configuration.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse configuration file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    if isinstance(data.get(section), dict):
        data = data[section]

    return IteratorConfig.from_dict(data)
