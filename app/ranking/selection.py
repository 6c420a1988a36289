"""Per-organization result limiting with phone-only backfill."""

from typing import List, Sequence

from app.domain.models import ContactRecord, OrganizationResult, RankedCandidate


def limit_with_backfill(
    organization: str,
    company: str,
    primary: Sequence[RankedCandidate],
    backfill: Sequence[RankedCandidate],
    max_contacts: int,
    extracted_at: str,
) -> OrganizationResult:
    """Select at most ``max_contacts`` records for one organization.

    Takes primary (email-backed, ranked, deduplicated) candidates first. If
    fewer than ``max_contacts`` were available, appends phone-only backfill
    candidates in their ranked order until the limit is reached or the pool
    is exhausted.

    Args:
        organization: Organization name as given
        company: Normalized organization name
        primary: Ranked, deduplicated valid candidates
        backfill: Ranked email-less candidates with a valid phone
        max_contacts: Maximum records to emit
        extracted_at: Fallback extraction timestamp (ISO 8601)

    Returns:
        OrganizationResult with the selected records in output order
    """
    if max_contacts < 1:
        raise ValueError(f"max_contacts must be >= 1, got: {max_contacts}")

    contacts: List[ContactRecord] = [
        ContactRecord.from_ranked(candidate, extracted_at)
        for candidate in primary[:max_contacts]
    ]

    for candidate in backfill:
        if len(contacts) >= max_contacts:
            break
        if candidate.email is not None or not candidate.phone:
            continue
        contacts.append(ContactRecord.from_ranked(candidate, extracted_at, backfilled=True))

    return OrganizationResult(
        organization=organization,
        company=company,
        contacts=tuple(contacts),
    )
