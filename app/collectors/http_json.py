"""Collector backed by an HTTP endpoint that returns candidate JSON."""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from app.domain.models import RawCandidate
from app.logging import get_logger

from .base import BaseCollector
from .exceptions import CollectorConfigurationError, CollectorResponseError

logger = get_logger(__name__, component="collector")


class JsonEndpointCollector(BaseCollector):
    """Fetches candidates from ``url_template`` formatted per organization.

    The template may use ``{organization}`` and ``{region}`` placeholders;
    both are URL-quoted. The response must be a JSON list of candidate
    objects, or an object with such a list under ``contacts``.

    Example options::

        collector: http_json
        options:
          url_template: https://contacts.example.com/api/{organization}?region={region}
    """

    def __init__(
        self,
        url_template: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if not url_template or "://" not in url_template:
            raise CollectorConfigurationError(
                f"{self.source.value} http_json collector requires an absolute 'url_template' option"
            )
        self.url_template = url_template
        self.params = dict(params or {})

    def build_url(self, organization: str, region: Optional[str] = None) -> str:
        """Fill the URL template for one organization."""
        try:
            return self.url_template.format(
                organization=quote(organization.strip(), safe=""),
                region=quote(region or "", safe=""),
            )
        except (KeyError, IndexError) as e:
            raise CollectorConfigurationError(
                f"Invalid placeholder in url_template {self.url_template!r}: {e}"
            ) from e

    def collect(self, organization: str, region: Optional[str] = None) -> List[RawCandidate]:
        url = self.build_url(organization, region)
        payload = self._fetch_json(url, params=self.params or None)

        if isinstance(payload, dict):
            payload = payload.get("contacts")
        if not isinstance(payload, list):
            raise CollectorResponseError(
                f"Expected a list of contacts from {url}, got {type(payload).__name__}"
            )

        logger.debug(
            f"Fetched {len(payload)} candidate(s) from {url}",
            extra={"event": "collector.http_json.fetched", "url": url, "count": len(payload)},
        )
        return self._build_candidates(organization, payload)
