"""Organization scheduler: bounded-concurrency processing of organizations."""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Generic, Optional, Sequence, TypeVar

from app.logging import get_logger
from app.logging.context import bind_log_context, log_context

logger = get_logger(__name__, component="scheduler")

T = TypeVar("T")


class OrganizationScheduler(Generic[T]):
    """
    Runs one pipeline task per organization with at most ``max_concurrency``
    in flight.

    A finished task frees its worker for the next queued organization right
    away. Completion callbacks run on the calling thread, one per
    organization, as tasks finish; an exception raised by a task is handed to
    ``on_failure`` and never reaches sibling tasks or the caller.
    """

    def __init__(self, max_concurrency: int = 2):
        """
        Initialize the scheduler.

        Args:
            max_concurrency: Maximum organizations processed at once

        Raises:
            ValueError: If max_concurrency is below 1
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got: {max_concurrency}")
        self.max_concurrency = max_concurrency

    def _with_context(self, process: Callable[[str], T], organization: str) -> T:
        with log_context(organization=organization):
            return process(organization)

    def run(
        self,
        organizations: Sequence[str],
        process: Callable[[str], T],
        on_success: Callable[[str, T], None],
        on_failure: Callable[[str, BaseException], None],
    ) -> int:
        """
        Process every organization and invoke one callback per organization.

        Args:
            organizations: Organization names, processed in submission order
            process: Pipeline for one organization
            on_success: Called with (organization, result) when process returns
            on_failure: Called with (organization, exception) when process raises

        Returns:
            Number of organizations that failed
        """
        if not organizations:
            return 0

        failures = 0
        workers = min(self.max_concurrency, len(organizations))

        logger.info(
            f"Scheduling {len(organizations)} organization(s) with concurrency {workers}",
            extra={
                "event": "scheduler.started",
                "organizations": len(organizations),
                "max_concurrency": workers,
            },
        )

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="organization") as executor:
            futures: Dict[Future, str] = {
                executor.submit(bind_log_context(self._with_context), process, organization): organization
                for organization in organizations
            }

            for future in as_completed(futures):
                organization = futures[future]
                error: Optional[BaseException] = future.exception()
                with log_context(organization=organization):
                    if error is None:
                        on_success(organization, future.result())
                        continue

                    failures += 1
                    logger.error(
                        f"Organization pipeline failed for {organization}: {error}",
                        extra={
                            "event": "organization.failed",
                            "error_type": type(error).__name__,
                        },
                        exc_info=(type(error), error, error.__traceback__),
                    )
                    on_failure(organization, error)

        return failures
