"""Candidate normalization: RawCandidate -> NormalizedCandidate.

Rules are applied independently per field:
1. Trim surrounding whitespace on every string field
2. Lower-case the email address
3. Strip separators (whitespace, parentheses, hyphens, periods) from the phone
4. Derive ``company`` by removing one trailing legal-entity suffix from the
   organization name

Absent fields stay absent. Normalizing a NormalizedCandidate again returns an
equal candidate, because ``company`` is always derived from ``organization``.
"""

import logging
import re
from typing import Iterable, List, Optional

from app.domain.models import OPTIONAL_TEXT_FIELDS, NormalizedCandidate, RawCandidate
from app.logging import get_logger

logger = get_logger(__name__, component="normalization")

# Checked in order; multi-word forms come before the shorter forms they contain.
LEGAL_SUFFIXES = (
    "GmbH & Co. KG",
    "GmbH & Co KG",
    "GmbH",
    "AG",
    "SE",
    "KG",
    "OHG",
    "GbR",
    "UG (haftungsbeschränkt)",
    "UG",
    "e.V.",
    "Inc.",
    "Inc",
    "LLC",
    "Ltd.",
    "Ltd",
    "Corp.",
    "Corp",
)

_SUFFIX_PATTERNS = tuple(
    re.compile(r"[\s,]+" + re.escape(suffix) + r"$", re.IGNORECASE)
    for suffix in LEGAL_SUFFIXES
)

PHONE_SEPARATORS = re.compile(r"[\s()\-.]")


def strip_legal_suffix(name: str) -> str:
    """Remove at most one trailing legal-entity suffix from a company name.

    The suffix must be separated from the name by whitespace or a comma, so
    "Stage" is left alone while "Stage AG" becomes "Stage".

    Args:
        name: Organization name

    Returns:
        Name without its legal suffix, or the trimmed name if none matched
        (or if removing it would leave nothing)

    Example:
        >>> strip_legal_suffix("Acme GmbH")
        'Acme'
        >>> strip_legal_suffix("Widget Works, Inc.")
        'Widget Works'
    """
    trimmed = name.strip()
    for pattern in _SUFFIX_PATTERNS:
        match = pattern.search(trimmed)
        if match:
            stripped = trimmed[: match.start()].rstrip(" ,")
            return stripped or trimmed
    return trimmed


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Strip separator characters from a phone number.

    A value made only of separators is treated as absent.
    """
    if phone is None:
        return None
    stripped = PHONE_SEPARATORS.sub("", phone)
    return stripped or None


def _trim(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class CandidateNormalizer:
    """Converts raw candidates from collectors into normalized candidates."""

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def normalize(self, candidate: RawCandidate) -> NormalizedCandidate:
        """Normalize a single candidate.

        Accepts any RawCandidate subclass; pipeline-stage fields of a later
        model (verdict, score) are dropped.
        """
        data = candidate.model_dump(
            include=set(RawCandidate.model_fields), by_alias=False
        )

        for field in OPTIONAL_TEXT_FIELDS:
            data[field] = _trim(data[field])

        if data["email"] is not None:
            data["email"] = data["email"].lower()
        data["phone"] = normalize_phone(data["phone"])

        organization = candidate.organization.strip()
        data["organization"] = organization
        data["company"] = strip_legal_suffix(organization)

        return NormalizedCandidate.model_validate(data)

    def normalize_all(self, candidates: Iterable[RawCandidate]) -> List[NormalizedCandidate]:
        """Normalize a batch of candidates, keeping input order."""
        normalized = [self.normalize(candidate) for candidate in candidates]
        self.logger.debug(
            f"Normalized {len(normalized)} candidates",
            extra={"event": "normalization.completed", "count": len(normalized)},
        )
        return normalized


_default_normalizer = CandidateNormalizer()


def normalize_candidate(candidate: RawCandidate) -> NormalizedCandidate:
    """Normalize one candidate with the default normalizer."""
    return _default_normalizer.normalize(candidate)
