"""Configuration management module for the organization contact finder."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError, InputShapeError
from .loader import load_config, parse_run_config, validate_config_file
from .models import (
    DEFAULT_TARGET_ROLES,
    AdvancedConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    OutputConfig,
    RunConfig,
    SourceConfig,
)

__all__ = [
    # Main loader functions
    "load_config",
    "parse_run_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "RunConfig",
    "SourceConfig",
    "LoggingConfig",
    "OutputConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    "DEFAULT_TARGET_ROLES",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "InputShapeError",
]
