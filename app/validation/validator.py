"""Whole-record contact validation."""

import logging
from typing import List, Optional

from app.domain.models import NormalizedCandidate, ValidatedCandidate
from app.logging import get_logger

from .rules import (
    check_email,
    check_job_title,
    check_name,
    check_phone,
    check_profile_url,
    check_salutation,
)

logger = get_logger(__name__, component="validation")


class ContactValidator:
    """Attaches a validity verdict and violated rules to normalized candidates.

    A record is valid only when the company is non-empty, first and last name,
    email and job title are valid, and every optional field that is present
    (phone, salutation, profile URL) is valid too. The candidate fields are
    never modified.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def violations(self, candidate: NormalizedCandidate) -> List[str]:
        """Return the identifiers of every rule the candidate violates."""
        violations: List[str] = []
        if not candidate.company:
            violations.append("company.missing")
        violations.extend(check_name(candidate.first_name, "first_name"))
        violations.extend(check_name(candidate.last_name, "last_name"))
        violations.extend(check_email(candidate.email))
        violations.extend(check_job_title(candidate.job_title))
        violations.extend(check_phone(candidate.phone))
        violations.extend(check_salutation(candidate.salutation))
        violations.extend(check_profile_url(candidate.profile_url))
        return violations

    def validate(self, candidate: NormalizedCandidate) -> ValidatedCandidate:
        """Validate one candidate.

        Example:
            >>> verdict = ContactValidator().validate(candidate)
            >>> verdict.is_valid, verdict.violations
            (False, ('email.generic_inbox',))
        """
        violations = self.violations(candidate)
        return ValidatedCandidate.model_validate(
            {
                **candidate.model_dump(include=set(NormalizedCandidate.model_fields)),
                "is_valid": not violations,
                "violations": tuple(violations),
            }
        )

    def validate_all(self, candidates: List[NormalizedCandidate]) -> List[ValidatedCandidate]:
        validated = [self.validate(candidate) for candidate in candidates]
        valid_count = sum(1 for candidate in validated if candidate.is_valid)
        self.logger.debug(
            f"Validated {len(validated)} candidates, {valid_count} valid",
            extra={
                "event": "validation.completed",
                "count": len(validated),
                "valid": valid_count,
            },
        )
        return validated
