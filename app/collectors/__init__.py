"""Source collectors producing raw candidate contacts per organization."""

from .base import BaseCollector
from .exceptions import (
    CollectorConfigurationError,
    CollectorError,
    CollectorHTTPError,
    CollectorResponseError,
    CollectorTimeoutError,
    is_retryable,
)
from .factory import build_collectors, get_collector, resolve_collector_class
from .file import FileCollector
from .http_json import JsonEndpointCollector

__all__ = [
    "BaseCollector",
    "FileCollector",
    "JsonEndpointCollector",
    "build_collectors",
    "get_collector",
    "resolve_collector_class",
    "is_retryable",
    "CollectorError",
    "CollectorHTTPError",
    "CollectorTimeoutError",
    "CollectorResponseError",
    "CollectorConfigurationError",
]
