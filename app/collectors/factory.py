"""Factory functions for instantiating source collectors."""

import importlib
import logging
from typing import Dict, List, Optional, Type

from app.config.models import AdvancedConfig, RunConfig, SourceConfig
from app.utils.rate_limiter import DomainRateLimiter

from .base import BaseCollector
from .exceptions import CollectorConfigurationError
from .file import FileCollector
from .http_json import JsonEndpointCollector

logger = logging.getLogger(__name__)

BUILTIN_COLLECTOR_CLASSES: Dict[str, Type[BaseCollector]] = {
    "file": FileCollector,
    "http_json": JsonEndpointCollector,
}


def resolve_collector_class(collector: str) -> Type[BaseCollector]:
    """Resolve a built-in collector name or a 'package.module:ClassName' path.

    Raises:
        CollectorConfigurationError: If the module or class cannot be loaded,
            or the class is not a BaseCollector
    """
    if collector in BUILTIN_COLLECTOR_CLASSES:
        return BUILTIN_COLLECTOR_CLASSES[collector]

    module_name, _, class_name = collector.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CollectorConfigurationError(
            f"Cannot import collector module {module_name!r}: {e}"
        ) from e

    collector_class = getattr(module, class_name, None)
    if not isinstance(collector_class, type) or not issubclass(collector_class, BaseCollector):
        raise CollectorConfigurationError(
            f"{collector!r} does not name a BaseCollector subclass"
        )
    return collector_class


def get_collector(
    source_config: SourceConfig,
    advanced_config: AdvancedConfig,
    rate_limiter: Optional[DomainRateLimiter] = None,
) -> BaseCollector:
    """Instantiate the collector configured for one source.

    The collector receives the source type, the shared rate limiter, HTTP
    settings from advanced_config, and the source's ``options`` as keyword
    arguments.

    Raises:
        CollectorConfigurationError: If the collector cannot be resolved or built

    Example:
        >>> source = SourceConfig(type="website", collector="file", options={"path": "export.yaml"})
        >>> collector = get_collector(source, AdvancedConfig())
        >>> candidates = collector.collect("Acme GmbH")
    """
    collector_class = resolve_collector_class(source_config.collector)

    logger.debug(
        "Creating collector instance",
        extra={
            "source": str(source_config.type),
            "collector_class": collector_class.__name__,
        },
    )

    try:
        return collector_class(
            source=source_config.type,
            rate_limiter=rate_limiter,
            timeout=advanced_config.http_request_timeout,
            user_agent=advanced_config.user_agent,
            max_candidates=advanced_config.max_candidates_per_source,
            **source_config.options,
        )
    except CollectorConfigurationError:
        raise
    except Exception as e:
        raise CollectorConfigurationError(
            f"Failed to create {source_config.collector} collector for {source_config.type}: {e}"
        ) from e


def build_collectors(
    config: RunConfig, rate_limiter: Optional[DomainRateLimiter] = None
) -> List[BaseCollector]:
    """Build collectors for every source enabled for the run's region.

    Order follows the ``sources`` list, which is the collectors' precedence.

    Raises:
        CollectorConfigurationError: If any enabled source cannot be built
    """
    collectors = [
        get_collector(source, config.advanced, rate_limiter)
        for source in config.get_enabled_sources()
    ]

    logger.info(
        f"Built {len(collectors)} collector(s)",
        extra={
            "event": "collectors.built",
            "collectors": [collector.name for collector in collectors],
            "region": config.region,
        },
    )
    return collectors
