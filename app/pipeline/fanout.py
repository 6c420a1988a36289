"""Concurrent collector fan-out for one organization.

Every enabled collector runs in its own daemon thread with bounded retries
and exponential backoff. The runner joins all of them before returning: a
collector that fails or exceeds its deadline contributes an empty list and an
outcome record, never an exception. Once enough raw candidates have arrived,
collectors that have not been launched yet are skipped.
"""

import queue
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from app.collectors.base import BaseCollector
from app.collectors.exceptions import is_retryable
from app.config.models import RunConfig
from app.domain.models import RawCandidate
from app.logging import get_logger
from app.logging.context import bind_log_context, log_context

from .models import (
    OUTCOME_FAILED,
    OUTCOME_SKIPPED,
    OUTCOME_SUCCEEDED,
    OUTCOME_TIMED_OUT,
    CollectorOutcome,
    FanOutResult,
)

logger = get_logger(__name__, component="fanout")


@dataclass
class _Launch:
    index: int
    collector: BaseCollector
    stop: threading.Event
    started: float
    deadline: float


@dataclass
class _AttemptResult:
    candidates: List[RawCandidate]
    attempts: int
    error: Optional[BaseException] = None


class CollectorFanOut:
    """Runs a list of collectors for one organization and joins the results.

    Attributes:
        max_retries: Retries after the first failed attempt
        retry_initial_delay: Seconds before the first retry; doubles per retry
        timeout: Deadline per collector in seconds, retries included
        abundance_threshold: Raw candidates after which unlaunched collectors
            are skipped (0 disables early stop)
        parallelism: Collectors running at once (None = all)
    """

    def __init__(
        self,
        max_retries: int = 1,
        retry_initial_delay: float = 1.0,
        timeout: float = 120.0,
        abundance_threshold: int = 0,
        parallelism: Optional[int] = None,
        clock=time.monotonic,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got: {max_retries}")
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got: {timeout}")

        self.max_retries = max_retries
        self.retry_initial_delay = retry_initial_delay
        self.timeout = timeout
        self.abundance_threshold = abundance_threshold
        self.parallelism = parallelism
        self._clock = clock

    @classmethod
    def from_config(cls, config: RunConfig) -> "CollectorFanOut":
        return cls(
            max_retries=config.max_retries,
            retry_initial_delay=config.retry_initial_delay_seconds,
            timeout=config.collector_timeout_seconds,
            abundance_threshold=config.abundance_threshold,
            parallelism=config.collector_parallelism,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (0-based)."""
        return self.retry_initial_delay * (2 ** attempt)

    def _is_abundant(self, found: int) -> bool:
        return self.abundance_threshold > 0 and found >= self.abundance_threshold

    def run(
        self,
        organization: str,
        collectors: Sequence[BaseCollector],
        region: Optional[str] = None,
    ) -> FanOutResult:
        """Run all collectors for one organization and join them.

        Args:
            organization: Organization name as given
            collectors: Collectors in precedence order
            region: Optional run region passed to each collector

        Returns:
            FanOutResult with the concatenated candidates (collector order)
            and one outcome per collector
        """
        if not collectors:
            return FanOutResult()

        parallelism = min(self.parallelism or len(collectors), len(collectors))
        pending: List[Tuple[int, BaseCollector]] = list(enumerate(collectors))
        in_flight: Dict[int, _Launch] = {}
        outcomes: Dict[int, CollectorOutcome] = {}
        finished: "queue.Queue[Tuple[int, _AttemptResult]]" = queue.Queue()
        found = 0

        while pending or in_flight:
            while pending and len(in_flight) < parallelism:
                if self._is_abundant(found):
                    self._skip_pending(pending, outcomes, found)
                    break
                index, collector = pending.pop(0)
                in_flight[index] = self._launch(index, collector, organization, region, finished)

            if not in_flight:
                break

            next_deadline = min(info.deadline for info in in_flight.values())
            try:
                index, attempt_result = finished.get(
                    timeout=max(0.0, next_deadline - self._clock())
                )
            except queue.Empty:
                pass
            else:
                # Results of already abandoned collectors are dropped.
                info = in_flight.pop(index, None)
                if info is not None:
                    outcome = self._finish(info, attempt_result)
                    outcomes[index] = outcome
                    found += len(outcome.candidates)

            now = self._clock()
            for index, info in list(in_flight.items()):
                if info.deadline <= now:
                    del in_flight[index]
                    outcomes[index] = self._abandon(info, now)

        ordered = [outcomes[index] for index in sorted(outcomes)]
        candidates = [candidate for outcome in ordered for candidate in outcome.candidates]

        logger.info(
            f"Joined {len(ordered)} collector(s) for {organization}",
            extra={
                "event": "fanout.joined",
                "candidates": len(candidates),
                "failures": sum(1 for outcome in ordered if outcome.is_failure),
                "skipped": sum(1 for outcome in ordered if outcome.status == OUTCOME_SKIPPED),
            },
        )
        return FanOutResult(candidates=candidates, outcomes=ordered)

    def _launch(
        self,
        index: int,
        collector: BaseCollector,
        organization: str,
        region: Optional[str],
        finished: "queue.Queue[Tuple[int, _AttemptResult]]",
    ) -> _Launch:
        stop = threading.Event()
        started = self._clock()
        info = _Launch(
            index=index,
            collector=collector,
            stop=stop,
            started=started,
            deadline=started + self.timeout,
        )
        # Daemon threads: a hung collector must not keep the process alive
        # once the run has moved past its deadline.
        worker = threading.Thread(
            target=bind_log_context(self._attempt),
            args=(index, collector, organization, region, stop, finished),
            name=f"collector-{collector.name}",
            daemon=True,
        )
        worker.start()
        return info

    def _attempt(
        self,
        index: int,
        collector: BaseCollector,
        organization: str,
        region: Optional[str],
        stop: threading.Event,
        finished: "queue.Queue[Tuple[int, _AttemptResult]]",
    ) -> None:
        try:
            result = self._collect_with_retry(collector, organization, region, stop)
        except Exception as e:
            result = _AttemptResult(candidates=[], attempts=0, error=e)
        finished.put((index, result))

    def _skip_pending(
        self,
        pending: List[Tuple[int, BaseCollector]],
        outcomes: Dict[int, CollectorOutcome],
        found: int,
    ) -> None:
        for index, collector in pending:
            outcomes[index] = CollectorOutcome(
                collector=collector.name,
                source=collector.source.value,
                status=OUTCOME_SKIPPED,
            )
        logger.info(
            f"Enough candidates found, skipping {len(pending)} collector(s)",
            extra={
                "event": "fanout.early_stop",
                "found": found,
                "threshold": self.abundance_threshold,
                "skipped_collectors": [collector.name for _, collector in pending],
            },
        )
        pending.clear()

    def _collect_with_retry(
        self,
        collector: BaseCollector,
        organization: str,
        region: Optional[str],
        stop: threading.Event,
    ) -> _AttemptResult:
        """Call collector.collect with bounded retries; never raises."""
        with log_context(source=collector.source.value):
            attempt = 0
            while True:
                try:
                    candidates = list(collector.collect(organization, region))
                    return _AttemptResult(candidates=candidates, attempts=attempt + 1)
                except Exception as e:
                    retryable = is_retryable(e)
                    logger.warning(
                        f"Collector {collector.name} attempt {attempt + 1} failed: {e}",
                        extra={
                            "event": "collector.attempt.failed",
                            "collector": collector.name,
                            "attempt": attempt + 1,
                            "error_type": type(e).__name__,
                            "retryable": retryable,
                        },
                    )
                    if not retryable or attempt >= self.max_retries or stop.is_set():
                        return _AttemptResult(candidates=[], attempts=attempt + 1, error=e)

                    # Event.wait returns True if the collector was abandoned meanwhile.
                    if stop.wait(self.backoff_delay(attempt)):
                        return _AttemptResult(candidates=[], attempts=attempt + 1, error=e)
                    attempt += 1

    def _finish(self, info: _Launch, result: _AttemptResult) -> CollectorOutcome:
        collector = info.collector
        duration = self._clock() - info.started

        if result.error is not None:
            logger.error(
                f"Collector {collector.name} failed after {result.attempts} attempt(s)",
                extra={
                    "event": "collector.failed",
                    "collector": collector.name,
                    "source": collector.source.value,
                    "attempts": result.attempts,
                    "error": str(result.error),
                },
            )
            return CollectorOutcome(
                collector=collector.name,
                source=collector.source.value,
                status=OUTCOME_FAILED,
                attempts=result.attempts,
                error=str(result.error),
                duration_seconds=duration,
            )

        logger.debug(
            f"Collector {collector.name} returned {len(result.candidates)} candidate(s)",
            extra={
                "event": "collector.succeeded",
                "collector": collector.name,
                "source": collector.source.value,
                "count": len(result.candidates),
                "attempts": result.attempts,
            },
        )
        return CollectorOutcome(
            collector=collector.name,
            source=collector.source.value,
            status=OUTCOME_SUCCEEDED,
            candidates=result.candidates,
            attempts=result.attempts,
            duration_seconds=duration,
        )

    def _abandon(self, info: _Launch, now: float) -> CollectorOutcome:
        info.stop.set()
        collector = info.collector
        logger.error(
            f"Collector {collector.name} timed out after {self.timeout}s",
            extra={
                "event": "collector.timed_out",
                "collector": collector.name,
                "source": collector.source.value,
                "timeout_seconds": self.timeout,
            },
        )
        return CollectorOutcome(
            collector=collector.name,
            source=collector.source.value,
            status=OUTCOME_TIMED_OUT,
            error=f"timed out after {self.timeout}s",
            duration_seconds=now - info.started,
        )

