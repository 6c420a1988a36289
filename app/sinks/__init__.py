"""Result sinks receiving each organization's emitted contacts."""

from .base import ResultSink
from .composite import CompositeResultSink
from .database import DatabaseResultSink
from .exceptions import PartialEmitError, SinkError
from .jsonl import JsonLinesResultSink

__all__ = [
    "ResultSink",
    "CompositeResultSink",
    "DatabaseResultSink",
    "JsonLinesResultSink",
    "PartialEmitError",
    "SinkError",
]
