"""Base collector class with shared functionality for all sources.

A collector turns one organization name into raw candidate contacts from one
information source. Everything source-specific (page scraping, search
queries, free-text sniffing) lives behind :meth:`BaseCollector.collect`; the
pipeline only sees the returned :class:`RawCandidate` list.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests
from pydantic import ValidationError

from app.domain.models import RawCandidate, SourceType
from app.logging import get_logger
from app.utils.rate_limiter import DomainRateLimiter, domain_key
from app.utils.timestamps import utc_now

from .exceptions import (
    CollectorConfigurationError,
    CollectorHTTPError,
    CollectorResponseError,
    CollectorTimeoutError,
)

logger = get_logger(__name__, component="collector")


class BaseCollector(ABC):
    """Base class for all source collectors.

    Provides rate-limited HTTP requests, error mapping, and conversion of
    loose dicts into :class:`RawCandidate` models.

    Attributes:
        source: Source this collector reports its candidates under
        rate_limiter: Shared per-domain limiter (None disables spacing)
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        max_candidates: Maximum candidates returned per call (0 = unlimited)
    """

    def __init__(
        self,
        source: SourceType,
        rate_limiter: Optional[DomainRateLimiter] = None,
        timeout: int = 30,
        user_agent: str = "OrgContactFinder/1.0",
        max_candidates: int = 200,
    ) -> None:
        """Initialize collector with configuration.

        Raises:
            CollectorConfigurationError: If timeout is outside 1-300 seconds
                or user_agent is empty
        """
        if not 1 <= timeout <= 300:
            raise CollectorConfigurationError(
                f"Timeout must be between 1 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise CollectorConfigurationError("user_agent cannot be empty")

        self.source = SourceType(source)
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.max_candidates = max_candidates

        # Sessions are not thread-safe; each worker thread gets its own.
        self._local = threading.local()

    @property
    def name(self) -> str:
        """Short identifier used in logs."""
        return f"{self.source.value}:{type(self).__name__}"

    @abstractmethod
    def collect(self, organization: str, region: Optional[str] = None) -> List[RawCandidate]:
        """Collect raw candidates for one organization.

        Implementations must be safe to call from several threads at once for
        different organizations, and should check nothing but their own
        source: retries, timeouts and validation are handled by the caller.

        Args:
            organization: Organization name exactly as given in the run input
            region: Optional run region (e.g. "DE")

        Returns:
            List of RawCandidate models tagged with this collector's source

        Raises:
            CollectorError: On failures the caller should record (and maybe retry)
        """

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": self.user_agent})
            self._local.session = session
        return session

    def _fetch_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET a URL and return its parsed JSON body.

        Waits on the shared rate limiter for the URL's domain first.

        Raises:
            CollectorHTTPError: On 4xx/5xx status or connection failure
            CollectorTimeoutError: On request timeout
            CollectorResponseError: On a body that is not valid JSON
        """
        if self.rate_limiter is not None:
            self.rate_limiter.wait_for(domain_key(url))

        logger.debug(
            f"HTTP GET request to {url}",
            extra={"event": "collector.fetch.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._session().get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise CollectorTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            raise CollectorHTTPError(
                f"Request to {url} failed: {e}", status_code=0, url=url
            ) from e

        if response.status_code >= 400:
            log_level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                log_level,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "collector.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise CollectorHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CollectorResponseError(
                f"Failed to parse JSON response from {url}: {e}"
            ) from e

    def _build_candidates(
        self, organization: str, items: Iterable[Any]
    ) -> List[RawCandidate]:
        """Convert loose candidate dicts into RawCandidate models.

        The organization and source are always set by the collector, never
        taken from the item. Items that are not mappings or fail model
        validation are skipped with a warning.
        """
        extracted_at = utc_now()
        candidates: List[RawCandidate] = []
        skipped = 0

        for item in items:
            if not isinstance(item, Mapping):
                skipped += 1
                continue
            data = {
                key: value
                for key, value in item.items()
                if key not in ("organization", "source")
            }
            data.setdefault("extractedAt", data.pop("extracted_at", None) or extracted_at)
            try:
                candidates.append(
                    RawCandidate.model_validate(
                        {**data, "organization": organization, "source": self.source}
                    )
                )
            except ValidationError as e:
                skipped += 1
                logger.debug(
                    "Skipping malformed candidate",
                    extra={"event": "collector.candidate.malformed", "error": str(e)},
                )

        if skipped:
            logger.warning(
                f"Skipped {skipped} malformed candidate(s) from {self.name}",
                extra={"event": "collector.candidates.skipped", "skipped": skipped},
            )

        return self._truncate_candidates(candidates)

    def _truncate_candidates(self, candidates: List[RawCandidate]) -> List[RawCandidate]:
        """Truncate the list to max_candidates if configured."""
        if self.max_candidates > 0 and len(candidates) > self.max_candidates:
            logger.warning(
                "Truncating candidates to max_candidates limit",
                extra={
                    "event": "collector.candidates.truncated",
                    "collector": self.name,
                    "total": len(candidates),
                    "max": self.max_candidates,
                },
            )
            return candidates[: self.max_candidates]

        return candidates
