"""Pipeline orchestration for contact finding.

Per organization: fan out to collectors, normalize, validate, split the valid
candidates from the phone-only backfill pool, rank, deduplicate by email,
limit with backfill, and emit the result. Per run: schedule organizations
with bounded concurrency and collect the run statistics.
"""

import time
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

from app.collectors.base import BaseCollector
from app.collectors.factory import build_collectors
from app.config.models import RunConfig
from app.domain.models import OrganizationResult, RankedCandidate, ValidatedCandidate
from app.logging import get_logger
from app.logging.context import log_context
from app.normalization.service import CandidateNormalizer, strip_legal_suffix
from app.ranking.dedupe import deduplicate_by_email
from app.ranking.engine import PriorityRanker
from app.ranking.selection import limit_with_backfill
from app.scheduler.service import OrganizationScheduler
from app.sinks.base import ResultSink
from app.sinks.exceptions import PartialEmitError
from app.utils.rate_limiter import DomainRateLimiter
from app.utils.timestamps import format_timestamp, utc_now
from app.validation.validator import ContactValidator

from .fanout import CollectorFanOut
from .models import OrganizationRunStats, PipelineRunResult, RunStatistics

logger = get_logger(__name__, component="pipeline")


class OrganizationPipeline:
    """Turns one organization name into its emitted OrganizationResult."""

    def __init__(
        self,
        config: RunConfig,
        collectors: Sequence[BaseCollector],
        sink: ResultSink,
        run_id: str,
        fanout: Optional[CollectorFanOut] = None,
        normalizer: Optional[CandidateNormalizer] = None,
        validator: Optional[ContactValidator] = None,
        ranker: Optional[PriorityRanker] = None,
    ):
        self.config = config
        self.collectors = list(collectors)
        self.sink = sink
        self.run_id = run_id
        self.fanout = fanout or CollectorFanOut.from_config(config)
        self.normalizer = normalizer or CandidateNormalizer()
        self.validator = validator or ContactValidator()
        self.ranker = ranker or PriorityRanker(config.target_roles)

    def select(
        self, organization: str, validated: Sequence[ValidatedCandidate], stats: OrganizationRunStats
    ) -> OrganizationResult:
        """Split, rank, deduplicate and limit validated candidates."""
        primary: List[ValidatedCandidate] = []
        backfill_pool: List[ValidatedCandidate] = []

        for candidate in validated:
            if candidate.is_valid:
                primary.append(candidate)
            elif candidate.backfill_eligible:
                backfill_pool.append(candidate)
            else:
                stats.candidates_rejected += 1
                logger.info(
                    "Candidate rejected",
                    extra={
                        "event": "candidate.rejected",
                        "source": candidate.source.value,
                        "email": candidate.email,
                        "violations": list(candidate.violations),
                    },
                )

        stats.candidates_valid = len(primary)

        ranked: List[RankedCandidate] = self.ranker.rank(primary)
        deduplicated = deduplicate_by_email(ranked)
        stats.duplicates_removed = len(ranked) - len(deduplicated)
        ranked_backfill = self.ranker.rank(backfill_pool)

        return limit_with_backfill(
            organization=organization,
            company=strip_legal_suffix(organization),
            primary=deduplicated,
            backfill=ranked_backfill,
            max_contacts=self.config.max_contacts_per_org,
            extracted_at=format_timestamp(utc_now()),
        )

    def process(self, organization: str) -> Tuple[OrganizationResult, OrganizationRunStats]:
        """Run the full pipeline for one organization and emit its result.

        Collector failures are absorbed by the fan-out; any other exception
        propagates to the scheduler, which counts it as an organization error.
        """
        start = time.monotonic()
        stats = OrganizationRunStats(organization=organization)

        logger.info(
            f"Processing organization: {organization}",
            extra={"event": "organization.started", "collectors": len(self.collectors)},
        )

        fanout_result = self.fanout.run(organization, self.collectors, self.config.region)
        stats.candidates_found = len(fanout_result.candidates)
        stats.collector_failures = fanout_result.failure_count

        normalized = self.normalizer.normalize_all(fanout_result.candidates)
        validated = self.validator.validate_all(normalized)
        result = self.select(organization, validated, stats)

        try:
            stats.candidates_saved = self.sink.emit(self.run_id, result)
        except PartialEmitError as e:
            # Stored somewhere: count the records and flag the organization.
            stats.candidates_saved = e.written
            stats.sink_failures = len(e.failures)
            logger.error(
                f"Contacts for {organization} only partially stored: {e}",
                extra={"event": "organization.partially_stored", "failures": e.failures},
            )
        stats.backfilled = sum(1 for record in result.contacts if record.backfilled)
        stats.duration_seconds = time.monotonic() - start

        logger.info(
            f"Organization completed: {organization}",
            extra={
                "event": "organization.completed",
                "candidates_found": stats.candidates_found,
                "candidates_valid": stats.candidates_valid,
                "candidates_rejected": stats.candidates_rejected,
                "duplicates_removed": stats.duplicates_removed,
                "candidates_saved": stats.candidates_saved,
                "backfilled": stats.backfilled,
                "collector_failures": stats.collector_failures,
                "sink_failures": stats.sink_failures,
                "duration_ms": int(stats.duration_seconds * 1000),
            },
        )
        return result, stats


class ContactPipeline:
    """
    Orchestrates one run over all configured organizations.

    Builds the collectors once per run, shares one rate limiter among them,
    and processes organizations through the OrganizationScheduler.
    """

    def __init__(
        self,
        config: RunConfig,
        sink: ResultSink,
        collectors: Optional[Sequence[BaseCollector]] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
    ):
        """
        Initialize the contact pipeline.

        Args:
            config: Validated run configuration
            sink: Destination for results and the run summary
            collectors: Pre-built collectors (default: built from config.sources)
            rate_limiter: Shared per-domain limiter (default: from config)
        """
        self.config = config
        self.sink = sink
        self.rate_limiter = rate_limiter or DomainRateLimiter.from_milliseconds(
            config.min_domain_delay_ms
        )
        self._collectors = list(collectors) if collectors is not None else None

    def _get_collectors(self) -> List[BaseCollector]:
        if self._collectors is None:
            self._collectors = build_collectors(self.config, self.rate_limiter)
        return self._collectors

    def run_once(self, run_id: Optional[str] = None) -> PipelineRunResult:
        """
        Process every organization once.

        Returns:
            PipelineRunResult with the summary, emitted results and
            per-organization statistics. Organization failures are captured
            in the result; only collector construction errors propagate.
        """
        run_started_at = utc_now()
        run_id = run_id or uuid4().hex

        with log_context(run_id=run_id):
            return self._run(run_id, run_started_at)

    def _run(self, run_id: str, run_started_at) -> PipelineRunResult:
        organizations = self.config.organizations
        collectors = self._get_collectors()

        logger.info(
            f"Run started for {len(organizations)} organization(s)",
            extra={
                "event": "run.started",
                "organizations": len(organizations),
                "collectors": [collector.name for collector in collectors],
                "region": self.config.region,
                "max_contacts_per_org": self.config.max_contacts_per_org,
            },
        )

        if not collectors:
            logger.warning(
                "No collectors enabled; every organization will yield zero contacts",
                extra={"event": "run.no_collectors"},
            )

        statistics = RunStatistics(organizations_total=len(organizations))
        result = PipelineRunResult()
        organization_pipeline = OrganizationPipeline(
            self.config, collectors, self.sink, run_id
        )

        def on_success(organization: str, outcome: Tuple[OrganizationResult, OrganizationRunStats]) -> None:
            org_result, org_stats = outcome
            statistics.record_success(org_stats)
            result.results.append(org_result)
            result.organization_stats.append(org_stats)

        def on_failure(organization: str, error: BaseException) -> None:
            statistics.record_failure(organization)
            result.failed_organizations.append(organization)

        OrganizationScheduler(self.config.max_concurrency).run(
            organizations,
            organization_pipeline.process,
            on_success=on_success,
            on_failure=on_failure,
        )

        result.summary = statistics.snapshot(run_id, run_started_at, utc_now())

        try:
            self.sink.record_summary(result.summary)
        except Exception as e:
            logger.error(
                f"Failed to store run summary: {e}",
                extra={"event": "run.summary_failed", "error_type": type(e).__name__},
                exc_info=True,
            )

        logger.info(
            "Run completed",
            extra={"event": "run.completed", **result.summary.to_output_dict()},
        )
        return result
