"""Priority ranking of validated candidates against target roles.

Score rules:
1. Exact (case-insensitive) title match with target role i scores 1000 - i
2. Substring match in either direction with role i scores 500 - i
3. Otherwise a leadership keyword in the title scores 100
4. Otherwise 0

Ties on score are broken by source trust rank (higher first); candidates
equal on both keep their input order.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from app.domain.models import RankedCandidate, ValidatedCandidate, source_trust_rank

logger = logging.getLogger(__name__)

EXACT_MATCH_BASE = 1000
PARTIAL_MATCH_BASE = 500
LEADERSHIP_BONUS = 100

LEADERSHIP_KEYWORDS = (
    "head",
    "director",
    "chief",
    "vp",
    "vice president",
    "c-level",
    "lead",
    "leiter",
    "leitung",
    "geschäftsführer",
    "vorstand",
)


def score_title(job_title: Optional[str], target_roles: Sequence[str]) -> int:
    """Compute the priority score of a job title.

    A pure function of the title and the ordered role list.

    Example:
        >>> score_title("CTO", ["CEO", "CTO"])
        999
        >>> score_title("Deputy CTO", ["CEO", "CTO"])
        499
        >>> score_title("Head of Sales", ["CEO", "CTO"])
        100
    """
    if not job_title:
        return 0

    title = job_title.strip().lower()
    if not title:
        return 0

    for i, role in enumerate(target_roles):
        role = role.strip().lower()
        if not role:
            continue
        if title == role:
            return EXACT_MATCH_BASE - i
        if role in title or title in role:
            return PARTIAL_MATCH_BASE - i

    if any(keyword in title for keyword in LEADERSHIP_KEYWORDS):
        return LEADERSHIP_BONUS

    return 0


class PriorityRanker:
    """Scores and orders candidates for one organization."""

    def __init__(self, target_roles: Sequence[str], logger_instance: Optional[logging.Logger] = None):
        self.target_roles = list(target_roles)
        self.logger = logger_instance or logger

    def score(self, candidate: ValidatedCandidate) -> RankedCandidate:
        """Attach score and source trust rank to one candidate."""
        return RankedCandidate.model_validate(
            {
                **candidate.model_dump(include=set(ValidatedCandidate.model_fields)),
                "score": score_title(candidate.job_title, self.target_roles),
                "source_rank": source_trust_rank(candidate.source),
            }
        )

    def rank(self, candidates: Iterable[ValidatedCandidate]) -> List[RankedCandidate]:
        """Score candidates and sort best first.

        ``sorted`` is stable, so equal (score, source rank) pairs keep their
        input order.
        """
        ranked = sorted(
            (self.score(candidate) for candidate in candidates),
            key=lambda c: (-c.score, -c.source_rank),
        )
        self.logger.debug(
            f"Ranked {len(ranked)} candidates",
            extra={
                "event": "ranking.completed",
                "count": len(ranked),
                "top_score": ranked[0].score if ranked else None,
            },
        )
        return ranked
