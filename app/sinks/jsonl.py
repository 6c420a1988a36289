"""JSON-lines result sink."""

import json
import threading
from pathlib import Path
from typing import Optional, TextIO

from app.domain.models import OrganizationResult

from .base import ResultSink


class JsonLinesResultSink(ResultSink):
    """Appends one JSON object per contact to a file (or an open stream).

    Lines are flushed after each organization, so a crashed run still leaves
    every organization it finished.
    """

    def __init__(self, path: Optional[str] = None, stream: Optional[TextIO] = None):
        if (path is None) == (stream is None):
            raise ValueError("Provide exactly one of path or stream")

        self._owns_stream = stream is None
        if path is not None:
            file_path = Path(path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(file_path, "a", encoding="utf-8")
        self._stream: TextIO = stream
        self._lock = threading.Lock()

    def emit(self, run_id: str, result: OrganizationResult) -> int:
        lines = [
            json.dumps({**record.to_output_dict(), "runId": run_id}, ensure_ascii=False)
            for record in result.contacts
        ]
        with self._lock:
            for line in lines:
                self._stream.write(line + "\n")
            self._stream.flush()
        return len(lines)

    def close(self) -> None:
        with self._lock:
            if self._owns_stream and not self._stream.closed:
                self._stream.close()
