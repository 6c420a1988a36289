"""Exceptions raised by source collectors."""

# Client errors that usually clear up on their own.
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class CollectorError(Exception):
    """Base exception for all collector errors.

    The fan-out runner catches this (and anything else) per collector; it
    never escapes an organization's pipeline.
    """

    pass


class CollectorHTTPError(CollectorError):
    """HTTP request failed or returned a 4xx/5xx status.

    ``status_code`` is 0 when the request failed before a response arrived
    (connection refused, DNS failure).
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class CollectorTimeoutError(CollectorError):
    """HTTP request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class CollectorResponseError(CollectorError):
    """Response arrived but could not be parsed into candidates."""

    pass


class CollectorConfigurationError(CollectorError):
    """Collector was given invalid options or could not be constructed."""

    pass


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed collector attempt is worth repeating.

    Configuration errors and client errors (4xx other than 408/429) fail the
    same way every time; everything else, including unexpected exceptions
    from third-party collectors, gets another attempt.
    """
    if isinstance(error, CollectorConfigurationError):
        return False
    if isinstance(error, CollectorHTTPError):
        status = error.status_code
        if 400 <= status < 500 and status not in RETRYABLE_CLIENT_STATUSES:
            return False
    return True
