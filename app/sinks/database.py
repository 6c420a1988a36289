"""Sink persisting contacts and run summaries through the repositories."""

import threading

from app.domain.models import OrganizationResult, RunSummary
from app.logging import get_logger
from app.persistence.database import get_session
from app.persistence.repositories import ContactRepository, RunSummaryRepository

from .base import ResultSink

logger = get_logger(__name__, component="sink")


class DatabaseResultSink(ResultSink):
    """Writes each organization's contacts in one transaction.

    Requires init_database() to have run.
    """

    def __init__(self):
        # SQLite allows one writer at a time.
        self._lock = threading.Lock()

    def emit(self, run_id: str, result: OrganizationResult) -> int:
        with self._lock, get_session() as session:
            written = ContactRepository(session).save_all(run_id, result.contacts)

        logger.debug(
            f"Stored {written} contact(s) for {result.organization}",
            extra={"event": "sink.database.stored", "count": written},
        )
        return written

    def record_summary(self, summary: RunSummary) -> None:
        with self._lock, get_session() as session:
            RunSummaryRepository(session).save(summary)
