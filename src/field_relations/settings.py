#!/usr/bin/env python3
"""
Configuration management for field-relations.

Supports:
- YAML configuration files
- Environment variable overrides
- Default values
- Validation (through AnalysisOptions)
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .constants import (
    DEFAULT_FIELD_PATTERNS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_MIN_MATCH_COUNT,
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_WORKERS,
    MAX_DISTINCT_VALUES_PER_FIELD,
    MAX_VALUE_LENGTH,
)
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import AnalysisOptions

logger = get_logger(__name__)

CONFIG_FILE_CANDIDATES = (
    "field-relations.yml",
    "field-relations.yaml",
    ".field-relations.yml",
    ".field-relations.yaml",
    "~/.field-relations.yml",
    "~/.field-relations.yaml",
    "~/.config/field-relations/config.yml",
    "~/.config/field-relations/config.yaml",
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_MAPPING = {
    "FIELD_RELATIONS_MIN_MATCH_COUNT": "min_match_count",
    "FIELD_RELATIONS_MIN_CONFIDENCE": "min_confidence",
    "FIELD_RELATIONS_SAMPLE_SIZE": "sample_size",
    "FIELD_RELATIONS_WORKERS": "workers",
    "FIELD_RELATIONS_PATTERNS": "field_patterns",
    "FIELD_RELATIONS_LOG_LEVEL": "log_level",
}


@dataclass
class AnalysisSettings:
    """User-level settings with defaults."""

    # Scoring thresholds
    min_match_count: int = DEFAULT_MIN_MATCH_COUNT
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    max_relationships_per_source: Optional[int] = None

    # Extraction
    field_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_FIELD_PATTERNS))
    max_value_length: Optional[int] = MAX_VALUE_LENGTH
    max_distinct_values: Optional[int] = MAX_DISTINCT_VALUES_PER_FIELD

    # Output / runtime
    sample_size: int = DEFAULT_SAMPLE_SIZE
    workers: int = DEFAULT_WORKERS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def load(cls, config_path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> "AnalysisSettings":
        """
        Load settings from a file and the environment.

        An explicit ``config_path`` must exist; otherwise the standard
        locations are searched and a missing file just means defaults.

        Raises:
            ConfigurationError: The file is missing, unreadable or invalid.
        """
        settings = cls()

        if config_path:
            if not Path(config_path).exists():
                raise ConfigurationError(
                    f"Config file not found: {config_path}", config_key="config_path"
                )
            settings._load_from_file(config_path)
        else:
            found = cls.find_config_file()
            if found:
                settings._load_from_file(found)

        settings._load_from_env(os.environ if env is None else env)
        settings.log_level = str(settings.log_level).upper()
        if settings.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level {settings.log_level!r}",
                config_key="log_level",
                config_value=settings.log_level,
            )
        return settings

    @staticmethod
    def find_config_file() -> Optional[str]:
        """Find config file in standard locations."""
        for candidate in CONFIG_FILE_CANDIDATES:
            path = os.path.expanduser(candidate)
            if Path(path).exists():
                return path
        return None

    def _load_from_file(self, config_path: str) -> None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Error loading config from {config_path}", config_key="config_path", cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping",
                config_key="config_path",
            )

        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.warning("Ignoring unknown setting %r in %s", key, config_path)
        logger.debug("Loaded settings from %s", config_path)

    def _load_from_env(self, env: Dict[str, str]) -> None:
        for env_var, attr_name in ENV_MAPPING.items():
            raw = env.get(env_var)
            if raw is None:
                continue
            value: Any
            try:
                if attr_name in ("min_match_count", "sample_size", "workers"):
                    value = int(raw)
                elif attr_name == "min_confidence":
                    value = float(raw)
                elif attr_name == "field_patterns":
                    value = [p.strip() for p in raw.split(",") if p.strip()]
                else:
                    value = raw.strip().upper()
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}", config_key=env_var, config_value=raw, cause=e
                ) from e
            setattr(self, attr_name, value)

    def to_options(self, **overrides: Any) -> AnalysisOptions:
        """
        Build validated AnalysisOptions from these settings.

        Keyword overrides (e.g. callbacks, CLI flags) win over settings;
        ``None`` overrides are ignored.

        Raises:
            ConfigurationError: A threshold is out of range.
        """
        values: Dict[str, Any] = {
            "min_match_count": self.min_match_count,
            "min_confidence": self.min_confidence,
            "sample_size": self.sample_size,
            "field_patterns": (
                (self.field_patterns,)
                if isinstance(self.field_patterns, str)
                else tuple(self.field_patterns)
            ),
            "max_value_length": self.max_value_length,
            "max_distinct_values": self.max_distinct_values,
            "max_relationships_per_source": self.max_relationships_per_source,
            "workers": self.workers,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return AnalysisOptions(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, config_path: str) -> None:
        """Save current settings to a YAML file, excluding unset values."""
        data = {key: value for key, value in self.to_dict().items() if value is not None}
        Path(config_path).parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)


__all__ = ["AnalysisSettings", "CONFIG_FILE_CANDIDATES", "ENV_MAPPING", "LOG_LEVELS"]
