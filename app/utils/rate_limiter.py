"""Per-domain request spacing shared by all collectors.

The limiter owns a map of key -> last release time. The map is never exposed;
the only operation is :meth:`DomainRateLimiter.wait_for`, whose read-wait-write
sequence runs under a lock dedicated to that key. Different keys have
different locks, so a caller waiting on one domain never blocks another.
"""

import threading
import time
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from app.logging import get_logger

logger = get_logger(__name__, component="rate_limiter")


def domain_key(url_or_host: str) -> str:
    """Derive the rate-limit key for a URL or bare host name.

    The key is the lower-cased host name with a leading ``www.`` removed, so
    ``https://www.Acme.com/team`` and ``acme.com`` share one key.

    Args:
        url_or_host: Absolute URL or host name

    Returns:
        Normalized key (empty string if no host can be derived)
    """
    value = (url_or_host or "").strip()
    if "://" in value:
        host = urlsplit(value).hostname or ""
    else:
        host = value.split("/", 1)[0].split(":", 1)[0]

    host = host.lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host


class DomainRateLimiter:
    """Enforces a minimum interval between calls for the same key.

    Attributes:
        min_delay: Minimum seconds between two releases for the same key
    """

    def __init__(
        self,
        min_delay: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the limiter.

        Args:
            min_delay: Minimum spacing in seconds (0 disables waiting)
            clock: Monotonic clock, injectable for tests
            sleep: Sleep function, injectable for tests

        Raises:
            ValueError: If min_delay is negative
        """
        if min_delay < 0:
            raise ValueError(f"min_delay must be >= 0, got: {min_delay}")

        self.min_delay = float(min_delay)
        self._clock = clock
        self._sleep = sleep
        self._last_release: Dict[str, float] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        # Guards creation of per-key locks only; never held while waiting.
        self._registry_lock = threading.Lock()

    @classmethod
    def from_milliseconds(cls, min_delay_ms: int) -> "DomainRateLimiter":
        """Create a limiter from a delay in milliseconds."""
        return cls(min_delay=min_delay_ms / 1000.0)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def wait_for(self, key: str) -> float:
        """Block until ``key`` may be used, then record the release.

        Keys without a previous release proceed immediately. The last-release
        timestamp is written only after the wait finished, so an interrupted
        wait leaves the previous value untouched.

        Args:
            key: Rate-limit key (typically from :func:`domain_key`)

        Returns:
            Monotonic timestamp recorded as this call's release
        """
        key = domain_key(key)

        with self._lock_for(key):
            previous: Optional[float] = self._last_release.get(key)
            # Loop: a sleep may return early, the release may not.
            while previous is not None:
                remaining = self.min_delay - (self._clock() - previous)
                if remaining <= 0:
                    break
                logger.debug(
                    f"Waiting {remaining:.3f}s before next request to {key}",
                    extra={
                        "event": "rate_limiter.waiting",
                        "key": key,
                        "wait_seconds": round(remaining, 3),
                    },
                )
                self._sleep(remaining)

            released_at = self._clock()
            self._last_release[key] = released_at
            return released_at
