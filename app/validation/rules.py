"""Field predicates for contact validation.

Each ``check_*`` function inspects one value and returns the identifiers of
the rules it violates (empty list = valid). They are pure and do no I/O; email
syntax is checked with email-validator without DNS lookups.
"""

import re
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

MAX_EMAIL_LENGTH = 254

GENERIC_LOCAL_PARTS = (
    "info",
    "contact",
    "office",
    "hello",
    "mail",
    "support",
    "admin",
    "noreply",
    "no-reply",
)

LOCAL_PART_SEPARATORS = (".", "_", "-", "+")

PLACEHOLDER_TOKENS = frozenset(
    {"xxx", "n/a", "tbd", "unknown", "test", "dummy", "placeholder", "name"}
)

SALUTATIONS = frozenset(
    {"herr", "frau", "mr", "mr.", "mrs", "mrs.", "ms", "ms.", "mx", "mx.",
     "dr", "dr.", "prof", "prof."}
)

INTERNATIONAL_PHONE = re.compile(r"^(?:\+|00)[1-9]\d{6,14}$")
DOMESTIC_PHONE = re.compile(r"^0[1-9]\d{7,13}$")

PROFILE_URL = re.compile(
    r"^https://(?:(?:www|[a-z]{2})\.)?linkedin\.com/in/[A-Za-z0-9\-_%]+/?$"
    r"|^https://(?:www\.)?xing\.com/profile/[A-Za-z0-9\-_%]+/?$",
    re.IGNORECASE,
)

NAME_CHARS = re.compile(r"^[^\W\d_](?:[^\W\d_]|[ \-'’.])*$")

MIN_NAME_LENGTH = 2
MIN_JOB_TITLE_LENGTH = 3
MIN_PLACEHOLDER_RUN = 6
MAX_CODE_DIGITS = 3

_ASCENDING = "0123456789" * 3
_DESCENDING = "9876543210" * 3


def is_generic_local_part(local_part: str) -> bool:
    """Whether an email local-part is a role inbox rather than a person.

    True if it equals a generic token, or starts with one followed by a
    separator (``info.de``, ``support_team``, ``noreply+x``).
    """
    local = local_part.lower()
    for token in GENERIC_LOCAL_PARTS:
        if local == token:
            return True
        if local.startswith(token) and local[len(token):len(token) + 1] in LOCAL_PART_SEPARATORS:
            return True
    return False


def check_email(email: Optional[str]) -> List[str]:
    """Validate an email address.

    Example:
        >>> check_email("a.mueller@acme.com")
        []
        >>> check_email("contact.de@firm.com")
        ['email.generic_inbox']
    """
    if not email:
        return ["email.missing"]
    if len(email) > MAX_EMAIL_LENGTH:
        return ["email.too_long"]

    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return ["email.invalid_syntax"]

    local_part = email.rsplit("@", 1)[0]
    if is_generic_local_part(local_part):
        return ["email.generic_inbox"]
    return []


def _national_digits(phone: str) -> str:
    if phone.startswith("+"):
        return phone[1:]
    if phone.startswith("00"):
        return phone[2:]
    return phone[1:]


def is_placeholder_phone(phone: str) -> bool:
    """Whether the number is filler such as +49 30 0000000 or 0123456789.

    The national digits are filler when they form a consecutive ascending or
    descending run, or when they are one repeated digit once a country or
    area code of up to three digits is skipped.
    """
    national = _national_digits(phone)
    if national in _ASCENDING or national in _DESCENDING:
        return True
    for skip in range(MAX_CODE_DIGITS + 1):
        rest = national[skip:]
        if len(rest) >= MIN_PLACEHOLDER_RUN and len(set(rest)) == 1:
            return True
    return False


def check_phone(phone: Optional[str]) -> List[str]:
    """Validate an optional phone number that has already had separators stripped."""
    if phone is None:
        return []
    if not (INTERNATIONAL_PHONE.match(phone) or DOMESTIC_PHONE.match(phone)):
        return ["phone.invalid"]
    if is_placeholder_phone(phone):
        return ["phone.placeholder"]
    return []


def check_name(value: Optional[str], field: str) -> List[str]:
    """Validate a first or last name; ``field`` prefixes the rule identifiers."""
    if not value:
        return [f"{field}.missing"]
    if len(value) < MIN_NAME_LENGTH:
        return [f"{field}.too_short"]
    if value.lower() in PLACEHOLDER_TOKENS:
        return [f"{field}.placeholder"]
    if not NAME_CHARS.match(value):
        return [f"{field}.invalid_chars"]
    return []


def check_job_title(job_title: Optional[str]) -> List[str]:
    if not job_title:
        return ["job_title.missing"]
    if len(job_title) < MIN_JOB_TITLE_LENGTH:
        return ["job_title.too_short"]
    if job_title.lower() in PLACEHOLDER_TOKENS:
        return ["job_title.placeholder"]
    return []


def check_salutation(salutation: Optional[str]) -> List[str]:
    if salutation is None or salutation.lower() in SALUTATIONS:
        return []
    return ["salutation.invalid"]


def check_profile_url(profile_url: Optional[str]) -> List[str]:
    if profile_url is None or PROFILE_URL.match(profile_url):
        return []
    return ["profile_url.invalid"]
