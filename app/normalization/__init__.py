"""Candidate normalization layer.

This module provides:
- CandidateNormalizer: converts RawCandidate to NormalizedCandidate
- strip_legal_suffix: company name without its legal-entity suffix
- normalize_phone: phone number without separator characters
"""

from .service import (
    LEGAL_SUFFIXES,
    CandidateNormalizer,
    normalize_candidate,
    normalize_phone,
    strip_legal_suffix,
)

__all__ = [
    "CandidateNormalizer",
    "normalize_candidate",
    "normalize_phone",
    "strip_legal_suffix",
    "LEGAL_SUFFIXES",
]
