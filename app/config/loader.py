"""Configuration loader for the organization contact finder."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .environment import INPUT_ENV_VAR, EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError, InputShapeError
from .models import RunConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_CONFIG_CANDIDATES = (
    Path("config.yaml"),
    Path("config.json"),
    Path("config") / "config.yaml",
)


def load_config(config_path: Optional[Path] = None) -> tuple[RunConfig, EnvironmentConfig]:
    """
    Load and validate the run configuration and environment variables.

    The run configuration is taken from the first available of:
    1. The provided config_path (YAML or JSON file)
    2. Inline JSON in the CONTACT_FINDER_INPUT environment variable
    3. config.yaml, config.json or config/config.yaml in the current directory

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (RunConfig, EnvironmentConfig) with validated configuration

    Raises:
        ConfigurationError: If configuration is invalid or cannot be found
    """
    try:
        env_config = load_environment_config()
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load environment configuration: {e}",
            suggestions=["Check the variables in your .env file"],
        )

    if config_path is None and env_config.inline_input:
        config_dict = _parse_inline_input(env_config.inline_input)
    else:
        config_dict = _read_config_file(_find_config_file(config_path))

    run_config = parse_run_config(config_dict)

    warnings = check_for_warnings(run_config)
    if warnings:
        emit_warnings(warnings)

    return run_config, env_config


def parse_run_config(config_dict: Any) -> RunConfig:
    """
    Validate a raw configuration mapping into a RunConfig.

    Args:
        config_dict: Parsed YAML/JSON content

    Returns:
        Validated RunConfig

    Raises:
        ConfigurationError: If the content is empty or fails validation
    """
    if not config_dict:
        raise InputShapeError(
            "Configuration is empty",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                "Provide at least an 'organizations' list",
            ],
        )

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(config_dict).__name__}",
            suggestions=["Wrap the settings in a top-level object, e.g. {\"organizations\": [...]}"],
        )

    try:
        return RunConfig.model_validate(config_dict)
    except ValidationError as e:
        errors = []
        organizations_invalid = False
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            if error["loc"] and error["loc"][0] == "organizations":
                organizations_invalid = True
            error_msg = error["msg"]
            error_type = error["type"]

            if error_type == "missing":
                errors.append(f"Missing required field: {field_path}")
            elif error_type in ["string_type", "int_type", "bool_type", "list_type"]:
                expected_type = error_type.replace("_type", "")
                errors.append(
                    f"Invalid type for '{field_path}': expected {expected_type}, got {error.get('input')}"
                )
            elif "enum" in error_type:
                errors.append(f"Invalid value for '{field_path}': {error_msg}")
            else:
                errors.append(f"{field_path}: {error_msg}")

        error_class = InputShapeError if organizations_invalid else ConfigurationError
        raise error_class(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for correct format",
                "Check that 'organizations' lists at least one name",
                "Verify field types match the expected schema",
            ],
        )


def _parse_inline_input(raw: str) -> Dict[str, Any]:
    """Parse inline JSON configuration from the environment."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Failed to parse {INPUT_ENV_VAR} as JSON: {e}",
            suggestions=[
                f"Ensure {INPUT_ENV_VAR} holds a single JSON object",
                "Or pass a configuration file with --config",
            ],
        )


def _read_config_file(config_file: Path) -> Any:
    """Read a YAML or JSON configuration file."""
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                f"Ensure {config_file} exists and is readable",
            ],
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse configuration file: {e}",
            suggestions=[
                "Check YAML/JSON syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[
                f"Ensure {config_file} is readable",
                "Check file permissions",
            ],
        )


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Find configuration file using fallback logic.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Path to configuration file

    Raises:
        ConfigurationError: If no config file is found
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Check the path and try again",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_CANDIDATES:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration not found",
        errors=[f"Tried: {candidate}" for candidate in DEFAULT_CONFIG_CANDIDATES]
        + [f"Tried: {INPUT_ENV_VAR} environment variable"],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            f"Set {INPUT_ENV_VAR} to an inline JSON configuration",
            "Use --config flag to specify a custom location",
        ],
    )


def validate_config_file(config_path: Path) -> bool:
    """
    Validate a configuration file without running anything.

    Args:
        config_path: Path to configuration file

    Returns:
        True if valid, False otherwise (errors printed to stdout)
    """
    try:
        parse_run_config(_read_config_file(config_path))
        print(f"✓ Configuration file {config_path} is valid")
        return True
    except ConfigurationError as e:
        print(f"✗ Configuration validation failed:\n{e}")
        return False
