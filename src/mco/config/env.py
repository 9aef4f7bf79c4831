"""Environment variable reader with dependency injection support."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class EnvReader:
    """Read typed values from environment variables.

    Unparseable values are logged and replaced by the default, so a typo in
    the environment never aborts the program.

    Example:
        reader = EnvReader(env={"MCO_MAX_RETRIES": "5"})
        reader.get_int("MCO_MAX_RETRIES", 3)  # 5
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        value = self._env.get(var)
        if value is None or value == "":
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean; "true", "1", "yes" and "on" are true, case-insensitive."""
        value = self.get_str(var)
        if value is None:
            return default
        return value.strip().casefold() in _TRUE_VALUES

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path with tilde expansion. Existence is not checked."""
        value = self.get_str(var)
        if value is None:
            return default
        return Path(value).expanduser()
