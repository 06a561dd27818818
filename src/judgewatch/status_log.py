"""Single-slot message log surfaced in the monitor footer."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class Severity(str, Enum):
    ERROR = "Error"
    INFO = "Info"
    WARNING = "Warning"


@dataclass(frozen=True)
class LogEntry:
    timestamp: float
    severity: Severity
    text: str


class StatusLog:
    def __init__(
        self,
        *,
        ttl: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: LogEntry | None = None

    def post(self, severity: Severity, text: str) -> None:
        entry = LogEntry(timestamp=self._clock(), severity=severity, text=text)
        with self._lock:
            self._entry = entry

    def info(self, text: str) -> None:
        self.post(Severity.INFO, text)

    def warning(self, text: str) -> None:
        self.post(Severity.WARNING, text)

    def error(self, text: str) -> None:
        self.post(Severity.ERROR, text)

    def latest(self) -> LogEntry | None:
        with self._lock:
            return self._entry

    def fresh(self) -> LogEntry | None:
        """Return the current entry while it is younger than ``ttl``."""
        entry = self.latest()
        if entry is None:
            return None
        if self._clock() - entry.timestamp < self.ttl:
            return entry
        return None
