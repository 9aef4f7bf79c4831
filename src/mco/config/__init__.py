"""Configuration for the media conversion orchestrator."""

from mco.config.env import EnvReader
from mco.config.loader import (
    DEFAULT_CONFIG_FILE,
    get_config,
    get_default_config_path,
    load_config_file,
)
from mco.config.models import (
    BatchConfig,
    ConfigError,
    LoggingConfig,
    MCOConfig,
    ProcessConfig,
    RetryConfig,
    ToolPathsConfig,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "BatchConfig",
    "ConfigError",
    "EnvReader",
    "LoggingConfig",
    "MCOConfig",
    "ProcessConfig",
    "RetryConfig",
    "ToolPathsConfig",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
