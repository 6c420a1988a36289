"""Utility functions for hashing, time handling, and rate limiting."""

from .hashing import compute_contact_key, hash_string
from .rate_limiter import DomainRateLimiter, domain_key
from .timestamps import (
    ensure_utc,
    format_timestamp,
    utc_now,
)

__all__ = [
    # Hashing
    "compute_contact_key",
    "hash_string",
    # Rate limiting
    "DomainRateLimiter",
    "domain_key",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
]
