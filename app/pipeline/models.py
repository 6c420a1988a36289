"""Data models for pipeline execution tracking and reporting."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.domain.models import OrganizationResult, RawCandidate, RunSummary

OUTCOME_SUCCEEDED = "succeeded"
OUTCOME_FAILED = "failed"
OUTCOME_TIMED_OUT = "timed_out"
OUTCOME_SKIPPED = "skipped"


@dataclass
class CollectorOutcome:
    """
    Result of running one collector for one organization.

    Attributes:
        collector: Collector name (source and class)
        source: Source identifier
        status: succeeded, failed, timed_out or skipped
        candidates: Raw candidates returned (empty unless succeeded)
        attempts: Number of collect() calls made
        error: Last error message for failed/timed-out collectors
        duration_seconds: Wall time from launch to join
    """

    collector: str
    source: str
    status: str
    candidates: List[RawCandidate] = field(default_factory=list)
    attempts: int = 0
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def is_failure(self) -> bool:
        return self.status in (OUTCOME_FAILED, OUTCOME_TIMED_OUT)


@dataclass
class FanOutResult:
    """Joined output of all collectors for one organization."""

    candidates: List[RawCandidate] = field(default_factory=list)
    outcomes: List[CollectorOutcome] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_failure)


@dataclass
class OrganizationRunStats:
    """
    Statistics for a single organization's pipeline execution.

    Attributes:
        organization: Organization name as given
        candidates_found: Raw candidates returned by all collectors
        candidates_valid: Candidates passing validation
        candidates_rejected: Candidates dropped by validation (backfill pool excluded)
        duplicates_removed: Candidates dropped by email deduplication
        candidates_saved: Records emitted to the result sink
        backfilled: Emitted records that came from the phone-only pool
        collector_failures: Collectors that failed or timed out
        sink_failures: Sinks that failed to store the result while others succeeded
        duration_seconds: Time spent on this organization
    """

    organization: str
    candidates_found: int = 0
    candidates_valid: int = 0
    candidates_rejected: int = 0
    duplicates_removed: int = 0
    candidates_saved: int = 0
    backfilled: int = 0
    collector_failures: int = 0
    sink_failures: int = 0
    duration_seconds: float = 0.0


@dataclass
class RunStatistics:
    """
    Process-wide counters for one run.

    Only the organization scheduler's completion callback mutates these, one
    call per finished organization; each call holds the internal lock.
    """

    organizations_total: int = 0
    organizations_processed: int = 0
    candidates_found: int = 0
    candidates_valid: int = 0
    candidates_saved: int = 0
    errors: int = 0
    collector_failures: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_success(self, stats: OrganizationRunStats) -> None:
        """Count an organization whose pipeline completed.

        A partially stored result also counts as an error.
        """
        with self._lock:
            self.organizations_processed += 1
            self.candidates_found += stats.candidates_found
            self.candidates_valid += stats.candidates_valid
            self.candidates_saved += stats.candidates_saved
            self.collector_failures += stats.collector_failures
            if stats.sink_failures:
                self.errors += 1

    def record_failure(self, organization: str) -> None:
        """Count an organization whose pipeline raised."""
        with self._lock:
            self.organizations_processed += 1
            self.errors += 1

    def snapshot(self, run_id: str, started_at: datetime, finished_at: datetime) -> RunSummary:
        with self._lock:
            return RunSummary(
                run_id=run_id,
                started_at=started_at,
                finished_at=finished_at,
                organizations_total=self.organizations_total,
                organizations_processed=self.organizations_processed,
                candidates_found=self.candidates_found,
                candidates_valid=self.candidates_valid,
                candidates_saved=self.candidates_saved,
                errors=self.errors,
                collector_failures=self.collector_failures,
            )


@dataclass
class PipelineRunResult:
    """
    Aggregate results from a complete run.

    Attributes:
        summary: Counters for the run
        results: Emitted results, in completion order
        organization_stats: Per-organization statistics, in completion order
        failed_organizations: Organizations whose pipeline raised
    """

    summary: Optional[RunSummary] = None
    results: List[OrganizationResult] = field(default_factory=list)
    organization_stats: List[OrganizationRunStats] = field(default_factory=list)
    failed_organizations: List[str] = field(default_factory=list)

    @property
    def had_errors(self) -> bool:
        return bool(self.failed_organizations)
