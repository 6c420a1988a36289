"""Hashing utilities for generating stable contact keys.

This module provides deterministic hashing functions for:
- contact_key: unique identifier of an emitted contact within a run
"""

import hashlib
import re
from typing import Optional


def compute_contact_key(
    run_id: str,
    company: str,
    email: Optional[str],
    phone: Optional[str],
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> str:
    """Compute a unique key for an emitted contact.

    The key is a SHA256 hash of ``run_id:company:identity`` where identity is
    the lower-cased email, or ``tel:<phone>:<name>`` for email-less contacts.
    Email-less contacts sharing one phone number are told apart by name.

    Args:
        run_id: Identifier of the run that emitted the contact
        company: Normalized organization name
        email: Contact email (may be None for backfilled contacts)
        phone: Contact phone (used when email is None)
        first_name: Given name (part of the phone identity)
        last_name: Family name (part of the phone identity)

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)

    Raises:
        ValueError: If neither email nor phone is given
    """
    if email:
        identity = email.strip().lower()
    elif phone:
        name = _normalize_text(f"{first_name or ''} {last_name or ''}")
        identity = f"tel:{phone.strip()}:{name}"
    else:
        raise ValueError("A contact key needs an email or a phone number")

    composite_key = f"{run_id.strip()}:{_normalize_text(company)}:{identity}"
    return hash_string(composite_key)


def _normalize_text(text: str) -> str:
    """Lower-case, trim and collapse whitespace for consistent hashing."""
    return re.sub(r"\s+", " ", text.lower().strip())


def hash_string(value: str) -> str:
    """Compute SHA256 hash of a string value.

    Args:
        value: String to hash

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)
    """
    hash_obj = hashlib.sha256(value.encode("utf-8"))
    return hash_obj.hexdigest()
