"""Exceptions raised by result sinks."""

from typing import List


class SinkError(Exception):
    """Base exception for result sink errors."""

    pass


class PartialEmitError(SinkError):
    """Some sinks stored an organization's contacts and others failed.

    ``written`` is the number of records that reached at least one sink;
    ``failures`` holds one message per failing sink.
    """

    def __init__(self, message: str, written: int, failures: List[str]) -> None:
        super().__init__(message)
        self.written = written
        self.failures = failures
