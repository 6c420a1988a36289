"""Collector that serves candidates from a pre-collected YAML/JSON export.

Export format::

    Acme GmbH:
      - firstName: Anna
        lastName: Mueller
        email: a.mueller@acme.com
        jobTitle: CTO
    Widget Works Inc.:
      - ...

An optional top-level ``organizations`` key may wrap the mapping.
"""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from app.domain.models import RawCandidate
from app.logging import get_logger
from app.normalization.service import strip_legal_suffix

from .base import BaseCollector
from .exceptions import CollectorConfigurationError, CollectorResponseError

logger = get_logger(__name__, component="collector")


def _company_key(name: str) -> str:
    return strip_legal_suffix(name).casefold()


class FileCollector(BaseCollector):
    """Reads candidates for an organization from a local export file.

    The file is read lazily on first use and cached; lookups try the exact
    organization name, then a case-insensitive match, then a match on the
    company name without legal suffix.
    """

    def __init__(self, path: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not path:
            raise CollectorConfigurationError(
                f"{self.source.value} file collector requires a 'path' option"
            )
        self.path = Path(path)
        self._data: Optional[Dict[str, List[Any]]] = None
        self._load_lock = threading.Lock()

    def _load(self) -> Dict[str, List[Any]]:
        with self._load_lock:
            if self._data is not None:
                return self._data

            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    content = yaml.safe_load(f)
            except FileNotFoundError as e:
                raise CollectorConfigurationError(
                    f"Candidate file not found: {self.path}"
                ) from e
            except yaml.YAMLError as e:
                raise CollectorResponseError(
                    f"Failed to parse candidate file {self.path}: {e}"
                ) from e

            content = content or {}
            if isinstance(content, dict) and isinstance(content.get("organizations"), dict):
                content = content["organizations"]
            if not isinstance(content, dict):
                raise CollectorResponseError(
                    f"Candidate file {self.path} must map organization names to lists"
                )

            self._data = {str(name): items or [] for name, items in content.items()}
            logger.debug(
                f"Loaded candidate file {self.path}",
                extra={
                    "event": "collector.file.loaded",
                    "path": str(self.path),
                    "organizations": len(self._data),
                },
            )
            return self._data

    def _lookup(self, organization: str) -> List[Any]:
        data = self._load()
        if organization in data:
            return data[organization]

        folded = organization.strip().casefold()
        for name, items in data.items():
            if name.strip().casefold() == folded:
                return items

        company = _company_key(organization)
        for name, items in data.items():
            if _company_key(name) == company:
                return items

        return []

    def collect(self, organization: str, region: Optional[str] = None) -> List[RawCandidate]:
        items = self._lookup(organization)
        if not isinstance(items, list):
            raise CollectorResponseError(
                f"Entry for {organization!r} in {self.path} is not a list"
            )
        return self._build_candidates(organization, items)
