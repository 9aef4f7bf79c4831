"""Configuration models.

Each section of the TOML file maps onto one dataclass. Invalid values raise
ConfigError from ``__post_init__`` so a bad file fails at load time rather
than halfway through a batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

VALID_LOG_LEVELS = frozenset({"debug", "info", "warning", "error"})
VALID_LOG_FORMATS = frozenset({"text", "json"})


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


@dataclass
class ToolPathsConfig:
    """External tool paths. None means look the tool up in PATH."""

    ffmpeg: Path | None = None


@dataclass
class RetryConfig:
    """Retry behaviour for a single conversion.

    ``max_retries`` is the total number of attempts, including the first.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.base_delay < 0:
            raise ConfigError(f"base_delay must be >= 0, got {self.base_delay}")
        if self.backoff_multiplier < 1:
            raise ConfigError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )
        if self.max_delay is not None and self.max_delay < 0:
            raise ConfigError(f"max_delay must be >= 0, got {self.max_delay}")


@dataclass
class BatchConfig:
    """Batch scheduling limits."""

    max_concurrent: int = 2
    memory_threshold_mb: int = 1024
    memory_pause_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ConfigError(
                f"max_concurrent must be >= 1, got {self.max_concurrent}"
            )
        if self.memory_threshold_mb < 1:
            raise ConfigError(
                f"memory_threshold_mb must be >= 1, got {self.memory_threshold_mb}"
            )
        if self.memory_pause_seconds < 0:
            raise ConfigError(
                "memory_pause_seconds must be >= 0, "
                f"got {self.memory_pause_seconds}"
            )

    @property
    def memory_threshold_bytes(self) -> int:
        return self.memory_threshold_mb * 1024 * 1024


@dataclass
class ProcessConfig:
    """Encoder process handling."""

    # Seconds between SIGTERM and SIGKILL on cancellation
    kill_grace_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.kill_grace_seconds < 0:
            raise ConfigError(
                f"kill_grace_seconds must be >= 0, got {self.kill_grace_seconds}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    backup_count: int = 5

    def __post_init__(self) -> None:
        if self.level.casefold() not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"level must be one of {sorted(VALID_LOG_LEVELS)}, got {self.level}"
            )
        if self.format.casefold() not in VALID_LOG_FORMATS:
            raise ConfigError(
                f"format must be one of {sorted(VALID_LOG_FORMATS)}, "
                f"got {self.format}"
            )
        if self.max_bytes < 0 or self.backup_count < 0:
            raise ConfigError("max_bytes and backup_count must be >= 0")


@dataclass
class MCOConfig:
    """Complete orchestrator configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
