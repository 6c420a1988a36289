"""Fan a result out to several sinks."""

from typing import List, Sequence

from app.domain.models import OrganizationResult, RunSummary
from app.logging import get_logger

from .base import ResultSink
from .exceptions import PartialEmitError, SinkError

logger = get_logger(__name__, component="sink")


class CompositeResultSink(ResultSink):
    """Forwards every call to each child sink in order.

    Every child is tried even when an earlier one fails. If all children
    fail, ``emit`` raises SinkError and the caller counts the organization as
    failed. If only some fail, it raises PartialEmitError carrying the number
    of records that were stored. ``close`` always reaches every child.
    """

    def __init__(self, sinks: Sequence[ResultSink]):
        self.sinks: List[ResultSink] = list(sinks)

    def emit(self, run_id: str, result: OrganizationResult) -> int:
        counts: List[int] = []
        failures: List[str] = []

        for sink in self.sinks:
            try:
                counts.append(sink.emit(run_id, result))
            except Exception as e:
                failures.append(f"{type(sink).__name__}: {e}")
                logger.error(
                    f"{type(sink).__name__} failed to store {result.organization}: {e}",
                    extra={
                        "event": "sink.emit_failed",
                        "sink": type(sink).__name__,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )

        written = max(counts, default=0)
        if failures and not counts:
            raise SinkError(f"Every sink failed for {result.organization}: {'; '.join(failures)}")
        if failures:
            raise PartialEmitError(
                f"{len(failures)} of {len(self.sinks)} sink(s) failed for {result.organization}",
                written=written,
                failures=failures,
            )
        return written

    def record_summary(self, summary: RunSummary) -> None:
        for sink in self.sinks:
            sink.record_summary(summary)

    def close(self) -> None:
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error(
                    f"Failed to close {type(sink).__name__}: {e}",
                    extra={"event": "sink.close_failed"},
                    exc_info=True,
                )
