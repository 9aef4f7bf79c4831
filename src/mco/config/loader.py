"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed to get_config as overrides)
2. Environment variables (MCO_*)
3. Config file (~/.mco/config.toml, or MCO_CONFIG_PATH)
4. Default values

Environment variables:
- MCO_CONFIG_PATH: Path to config file
- MCO_FFMPEG_PATH: Path to ffmpeg executable
- MCO_MAX_RETRIES, MCO_RETRY_BASE_DELAY, MCO_BACKOFF_MULTIPLIER: retry policy
- MCO_MAX_CONCURRENT, MCO_MEMORY_THRESHOLD_MB: batch limits
- MCO_KILL_GRACE_SECONDS: seconds between SIGTERM and SIGKILL
- MCO_LOG_LEVEL, MCO_LOG_FILE, MCO_LOG_FORMAT: logging
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mco.config.env import EnvReader
from mco.config.models import (
    BatchConfig,
    ConfigError,
    LoggingConfig,
    MCOConfig,
    ProcessConfig,
    RetryConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".mco"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# (section, key) -> (environment variable, reader method)
_ENV_BINDINGS: dict[tuple[str, str], tuple[str, str]] = {
    ("tools", "ffmpeg"): ("MCO_FFMPEG_PATH", "get_path"),
    ("retry", "max_retries"): ("MCO_MAX_RETRIES", "get_int"),
    ("retry", "base_delay"): ("MCO_RETRY_BASE_DELAY", "get_float"),
    ("retry", "backoff_multiplier"): ("MCO_BACKOFF_MULTIPLIER", "get_float"),
    ("batch", "max_concurrent"): ("MCO_MAX_CONCURRENT", "get_int"),
    ("batch", "memory_threshold_mb"): ("MCO_MEMORY_THRESHOLD_MB", "get_int"),
    ("process", "kill_grace_seconds"): ("MCO_KILL_GRACE_SECONDS", "get_float"),
    ("logging", "level"): ("MCO_LOG_LEVEL", "get_str"),
    ("logging", "file"): ("MCO_LOG_FILE", "get_path"),
    ("logging", "format"): ("MCO_LOG_FORMAT", "get_str"),
}

_SECTIONS: dict[str, type] = {
    "tools": ToolPathsConfig,
    "retry": RetryConfig,
    "batch": BatchConfig,
    "process": ProcessConfig,
    "logging": LoggingConfig,
}

_PATH_KEYS = frozenset({("tools", "ffmpeg"), ("logging", "file")})


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path, honouring MCO_CONFIG_PATH."""
    reader = env_reader or EnvReader()
    return reader.get_path("MCO_CONFIG_PATH") or DEFAULT_CONFIG_FILE


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No config file at %s, using defaults", path)
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _layer_from_file(file_config: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    unknown_sections = sorted(set(file_config) - set(_SECTIONS))
    if unknown_sections:
        raise ConfigError(f"Unknown config sections: {', '.join(unknown_sections)}")

    layer: dict[str, dict[str, Any]] = {}
    for section, model in _SECTIONS.items():
        values = file_config.get(section, {})
        if not isinstance(values, Mapping):
            raise ConfigError(f"[{section}] must be a table")
        known = set(model.__dataclass_fields__)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown keys in [{section}]: {', '.join(unknown)}")
        layer[section] = {
            key: Path(value).expanduser() if (section, key) in _PATH_KEYS else value
            for key, value in values.items()
        }
    return layer


def _layer_from_env(reader: EnvReader) -> dict[str, dict[str, Any]]:
    layer: dict[str, dict[str, Any]] = {}
    for (section, key), (var, method) in _ENV_BINDINGS.items():
        value = getattr(reader, method)(var)
        if value is not None:
            layer.setdefault(section, {})[key] = value
    return layer


def get_config(
    config_path: Path | None = None,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    env_reader: EnvReader | None = None,
) -> MCOConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides MCO_CONFIG_PATH).
        overrides: CLI values keyed by section then field, e.g.
            ``{"logging": {"level": "debug"}}``. None values are ignored.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        MCOConfig with merged configuration.

    Raises:
        ConfigError: When the file cannot be parsed or a value is invalid.
    """
    reader = env_reader or EnvReader()
    path = config_path or get_default_config_path(reader)

    merged: dict[str, dict[str, Any]] = {section: {} for section in _SECTIONS}
    layers = (
        _layer_from_file(load_config_file(path)),
        _layer_from_env(reader),
        {s: dict(v) for s, v in (overrides or {}).items()},
    )
    for layer in layers:
        for section, values in layer.items():
            if section not in merged:
                raise ConfigError(f"Unknown config section: {section}")
            merged[section].update(
                {key: value for key, value in values.items() if value is not None}
            )

    try:
        sections = {
            section: model(**merged[section]) for section, model in _SECTIONS.items()
        }
    except TypeError as e:
        raise ConfigError(str(e)) from e
    return MCOConfig(**sections)
