"""
Configuration

YAML-backed configuration with dotted-key lookups, plus the voice settings
the session reads on every turn.

Lookup order for the config file:
    1. explicit path passed to load_config()
    2. CRM_VOICE_CONFIG environment variable
    3. ./config.yaml
Missing files fall back to the built-in defaults below.
"""

import copy
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from crm_voice.errors import ConfigError


DEFAULTS = {
    "logging": {
        "level": "INFO",
        "file": None,
        "console": True,
        "file_only_path": "logs/crm_voice.log",
    },
    "voice": {
        "language": "en-US",
        "speak_responses": True,
        "activation_method": "toggle",
        "continuous_listening": False,
        "confidence_threshold": 0.7,
    },
    "context": {
        "current_page": "/crm",
        "current_module": "crm",
        "timezone": "UTC",
    },
    "session": {
        "max_history": 50,
        "restart_delay_seconds": 0.1,
    },
    "backend": {
        "url": None,
        "token": None,
        "timeout_seconds": 10,
    },
}

ACTIVATION_METHODS = ("hold", "toggle")


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Nested configuration with dotted-key access"""

    def __init__(self, data: Optional[dict] = None, path: Optional[Path] = None):
        self._data = _merge(DEFAULTS, data or {})
        self.path = path

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key

        Args:
            key: Dotted path such as "voice.confidence_threshold"
            default: Returned when any segment is missing

        Returns:
            The stored value, or default
        """
        node = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dotted key, creating intermediate sections."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    def as_dict(self) -> dict:
        return copy.deepcopy(self._data)

    def __repr__(self):
        return f"Config(path={str(self.path) if self.path else None!r})"


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from YAML, falling back to defaults.

    Raises:
        ConfigError: the file exists but is not valid YAML or not a mapping.
    """
    candidate = path or os.environ.get("CRM_VOICE_CONFIG") or "config.yaml"
    config_path = Path(candidate)

    if not config_path.exists():
        if path:
            raise ConfigError(f"Config file not found: {config_path}")
        return Config()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")

    return Config(data, path=config_path)


@dataclass
class VoiceSettings:
    """User-tunable behaviour of a voice session."""

    language: str = "en-US"
    speak_responses: bool = True
    activation_method: str = "toggle"     # "hold" | "toggle"
    continuous_listening: bool = False
    confidence_threshold: float = 0.7

    def __post_init__(self):
        if self.activation_method not in ACTIVATION_METHODS:
            raise ConfigError(
                f"activation_method must be one of {ACTIVATION_METHODS}, "
                f"got {self.activation_method!r}"
            )
        if not 0.0 <= float(self.confidence_threshold) <= 1.0:
            raise ConfigError(
                f"confidence_threshold must be within [0, 1], "
                f"got {self.confidence_threshold!r}"
            )

    @classmethod
    def from_config(cls, config: Config) -> "VoiceSettings":
        values = {}
        for f in fields(cls):
            value = config.get(f"voice.{f.name}")
            if value is not None:
                values[f.name] = value
        return cls(**values)
