"""Email-keyed deduplication within one organization's candidates."""

from typing import Dict, List, Sequence, TypeVar

from app.domain.models import ValidatedCandidate

C = TypeVar("C", bound=ValidatedCandidate)


def deduplicate_by_email(candidates: Sequence[C]) -> List[C]:
    """Keep one candidate per case-insensitive email.

    Within a group the candidate with the higher ``score`` survives; without
    scores, or on equal scores, the earlier candidate wins. The pipeline
    ranks first, so "earlier" already means higher source trust. Candidates
    without an email are passed through untouched.

    Survivors keep the position of the first candidate of their group, so a
    ranked input stays ranked.
    """
    survivors: List[C] = []
    slot_by_email: Dict[str, int] = {}

    for candidate in candidates:
        if not candidate.email:
            survivors.append(candidate)
            continue

        key = candidate.email.lower()
        slot = slot_by_email.get(key)
        if slot is None:
            slot_by_email[key] = len(survivors)
            survivors.append(candidate)
            continue

        existing = survivors[slot]
        if getattr(candidate, "score", 0) > getattr(existing, "score", 0):
            survivors[slot] = candidate

    return survivors
