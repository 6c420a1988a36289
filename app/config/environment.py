"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

INPUT_ENV_VAR = "CONTACT_FINDER_INPUT"
DEFAULT_DATABASE_URL = "sqlite:///./data/contacts.db"


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
        inline_input: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        """Initialize environment configuration."""
        self.log_level = log_level
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.inline_input = inline_input
        self.environment = environment or "local"


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - DATABASE_URL: Database URL (default: sqlite:///./data/contacts.db)
    - CONTACT_FINDER_INPUT: Inline JSON run configuration
    - ENVIRONMENT: Environment label used in log records (default: local)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("LOG_LEVEL")
    database_url = os.getenv("DATABASE_URL")
    inline_input = os.getenv(INPUT_ENV_VAR)
    environment = os.getenv("ENVIRONMENT")

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )
        else:
            log_level = log_level.upper()

    if database_url is not None and not database_url.strip():
        errors.append("DATABASE_URL is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Unset variables you do not need; all of them are optional",
            ],
        )

    return EnvironmentConfig(
        log_level=log_level,
        database_url=database_url.strip() if database_url else None,
        inline_input=inline_input.strip() if inline_input and inline_input.strip() else None,
        environment=environment,
    )
