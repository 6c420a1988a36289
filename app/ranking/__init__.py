"""Ranking, deduplication and per-organization selection of candidates."""

from .dedupe import deduplicate_by_email
from .engine import LEADERSHIP_KEYWORDS, PriorityRanker, score_title
from .selection import limit_with_backfill

__all__ = [
    "PriorityRanker",
    "score_title",
    "LEADERSHIP_KEYWORDS",
    "deduplicate_by_email",
    "limit_with_backfill",
]
