"""Append-only, human-readable transcript of a scenario run."""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import IO, Iterator

if os.name == "posix":
    import fcntl

HEADER_TEMPLATE = "==== API TEST RUN {timestamp} ====\n"
ENTRY_TEMPLATE = "\n### {title}\nHTTP {status}\n{body}\n"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TranscriptLogger:
    """Writes the run header and one block per executed step.

    Every write opens the file, takes an exclusive lock (in-process, plus an
    advisory ``flock`` on POSIX), writes, and closes again.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def initialize(self, now: datetime | None = None) -> None:
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        self._write("w", HEADER_TEMPLATE.format(timestamp=timestamp))

    def record(self, title: str, body: str, status: int) -> None:
        self._write("a", ENTRY_TEMPLATE.format(title=title, status=status, body=body))

    def _write(self, mode: str, text: str) -> None:
        with self._lock:
            with self.path.open(mode, encoding="utf-8", newline="") as handle:
                with _exclusive(handle):
                    handle.write(text)
                    handle.flush()


@contextmanager
def _exclusive(handle: IO[str]) -> Iterator[None]:
    if os.name != "posix":
        yield
        return
    fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
    try:
        yield
    finally:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
