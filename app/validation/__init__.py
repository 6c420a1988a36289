"""Contact validation: field predicates and the whole-record validator."""

from .rules import (
    GENERIC_LOCAL_PARTS,
    PLACEHOLDER_TOKENS,
    check_email,
    check_job_title,
    check_name,
    check_phone,
    check_profile_url,
    check_salutation,
    is_generic_local_part,
    is_placeholder_phone,
)
from .validator import ContactValidator

__all__ = [
    "ContactValidator",
    "check_email",
    "check_phone",
    "check_name",
    "check_job_title",
    "check_salutation",
    "check_profile_url",
    "is_generic_local_part",
    "is_placeholder_phone",
    "GENERIC_LOCAL_PARTS",
    "PLACEHOLDER_TOKENS",
]
