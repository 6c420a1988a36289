"""Result sink interface."""

from abc import ABC, abstractmethod

from app.domain.models import OrganizationResult, RunSummary


class ResultSink(ABC):
    """Destination for emitted organization results.

    ``emit`` is called once per finished organization, possibly from several
    worker threads; implementations serialize their own writes.
    """

    @abstractmethod
    def emit(self, run_id: str, result: OrganizationResult) -> int:
        """Write the contacts of one organization.

        Returns:
            Number of contact records written
        """

    def record_summary(self, summary: RunSummary) -> None:
        """Store the run summary; called once at the end of a run."""

    def close(self) -> None:
        """Release resources held by the sink."""
