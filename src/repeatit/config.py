"""Optional YAML configuration file holding default drill options."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .content_loader import DEFAULT_SEPARATOR, DEFAULT_TOPIC_ANNOUNCE, ParsingParameters
from .logging_config import DEFAULT_LEVEL
from .models import DEFAULT_PASS_LIMIT, DEFAULT_PAUSE_SECONDS, Order, SessionConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".repeatit.yml"
CONFIG_ENV_VAR = "REPEATIT_CONFIG"

# config key -> (Settings field, expected type)
_KEYS: dict[str, tuple[str, type]] = {
    "limit": ("pass_limit", int),
    "pause": ("pause_ms", int),
    "interactive": ("interactive", bool),
    "linear": ("linear", bool),
    "reversed": ("reversed", bool),
    "no_repeat": ("no_repeat", bool),
    "topic_announce": ("topic_announce", str),
    "separator": ("separator", str),
    "log_level": ("log_level", str),
}


class ConfigError(ValueError):
    """Configuration file cannot be read or holds an invalid value."""


@dataclass(frozen=True)
class Settings:
    """Drill options resolved from defaults, config file and command line."""

    pass_limit: int = DEFAULT_PASS_LIMIT
    pause_ms: int = int(DEFAULT_PAUSE_SECONDS * 1000)
    interactive: bool = False
    linear: bool = False
    reversed: bool = False
    no_repeat: bool = False
    topic_announce: str = DEFAULT_TOPIC_ANNOUNCE
    separator: str = DEFAULT_SEPARATOR
    log_level: str = DEFAULT_LEVEL
    source: str | None = None

    def session_config(self) -> SessionConfig:
        """Build the session configuration for a drill."""
        return SessionConfig(
            interactive=self.interactive,
            pause=self.pause_ms / 1000,
            order=Order.LINEAR if self.linear else Order.RANDOM,
            reversed=self.reversed,
            pass_limit=self.pass_limit,
            no_repeat=self.no_repeat,
        )

    def parsing_parameters(self) -> ParsingParameters:
        """Build the lessons file parsing parameters."""
        return ParsingParameters(topic_announce=self.topic_announce, separator=self.separator)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the config path from the environment, else ``~/.repeatit.yml``."""
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_FILE_NAME


def load_settings(path: Path | str | None = None, *, required: bool = False) -> Settings:
    """Load settings from ``path``; a missing file yields defaults unless ``required``."""
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return Settings()

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping at top level.")

    settings = replace(settings_from_mapping(raw, str(config_path)), source=str(config_path))
    logger.info("Using config file: %s", config_path)
    return settings


def settings_from_mapping(raw: Mapping[str, Any], source: str = "<config>") -> Settings:
    """Validate config values and overlay them on the defaults."""
    values: dict[str, Any] = {}
    debug = False
    for key, value in raw.items():
        if key == "debug":
            if not isinstance(value, bool):
                raise ConfigError(f"{source}: 'debug' must be a boolean, got {value!r}.")
            debug = value
            continue
        entry = _KEYS.get(str(key))
        if entry is None:
            logger.warning("%s: ignoring unknown config key %r", source, key)
            continue
        field_name, expected = entry
        # bool is an int subclass; reject it where a number is expected
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(f"{source}: {key!r} must be of type {expected.__name__}, got {value!r}.")
        values[field_name] = value
    if debug:
        values["log_level"] = "DEBUG"
    return replace(Settings(), **values)
