"""Bounded-concurrency scheduling of per-organization pipelines."""

from .service import OrganizationScheduler

__all__ = [
    "OrganizationScheduler",
]
