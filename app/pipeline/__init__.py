"""Pipeline orchestration: collector fan-out, per-organization processing, runs."""

from .fanout import CollectorFanOut
from .models import (
    CollectorOutcome,
    FanOutResult,
    OrganizationRunStats,
    PipelineRunResult,
    RunStatistics,
)
from .runner import ContactPipeline, OrganizationPipeline

__all__ = [
    "ContactPipeline",
    "OrganizationPipeline",
    "CollectorFanOut",
    "CollectorOutcome",
    "FanOutResult",
    "OrganizationRunStats",
    "PipelineRunResult",
    "RunStatistics",
]
