"""Additional validation utilities for configuration."""

import warnings
from typing import List

from .models import RunConfig


def check_for_warnings(config: RunConfig) -> List[str]:
    """
    Check a validated configuration for likely mistakes.

    Args:
        config: Validated run configuration

    Returns:
        List of warning messages
    """
    warning_messages = []

    for source in config.sources:
        if not source.enabled:
            warning_messages.append(f"Source '{source.type}' is disabled and will be skipped")
        elif not source.serves_region(config.region):
            warning_messages.append(
                f"Source '{source.type}' does not serve region {config.region} and will be skipped"
            )

    if not config.get_enabled_sources():
        warning_messages.append(
            "No source is enabled for this run; every organization will yield zero contacts"
        )

    if config.max_contacts_per_org > 10:
        warning_messages.append(
            f"max_contacts_per_org={config.max_contacts_per_org} is above the recommended range (1-10)"
        )

    if not config.target_roles:
        warning_messages.append(
            "target_roles is empty; contacts are ranked by leadership keywords only"
        )

    normalized = [name.lower() for name in config.organizations]
    duplicates = sorted({name for name in normalized if normalized.count(name) > 1})
    if duplicates:
        warning_messages.append(
            f"Organizations listed more than once will be processed repeatedly: {', '.join(duplicates)}"
        )

    if config.min_domain_delay_ms < 250:
        warning_messages.append(
            f"Short min_domain_delay_ms ({config.min_domain_delay_ms}) may trigger rate limits or blocks"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
