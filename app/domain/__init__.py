"""Domain models for contact candidates and organization results."""

from .models import (
    SOURCE_TRUST_ORDER,
    ContactRecord,
    NormalizedCandidate,
    OrganizationResult,
    RankedCandidate,
    RawCandidate,
    RunSummary,
    SourceType,
    ValidatedCandidate,
    source_trust_rank,
)

__all__ = [
    "SourceType",
    "SOURCE_TRUST_ORDER",
    "source_trust_rank",
    "RawCandidate",
    "NormalizedCandidate",
    "ValidatedCandidate",
    "RankedCandidate",
    "ContactRecord",
    "OrganizationResult",
    "RunSummary",
]
