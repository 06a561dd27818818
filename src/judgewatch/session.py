"""State shared by the poller, renderer and input handler of one session."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from .config import MonitorConfig
from .records import RecordStore
from .status_log import StatusLog


class PauseFlag:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paused = False

    def is_set(self) -> bool:
        return self._paused

    def set(self) -> None:
        with self._lock:
            self._paused = True

    def clear(self) -> None:
        with self._lock:
            self._paused = False

    def toggle(self) -> bool:
        with self._lock:
            self._paused = not self._paused
            return self._paused


@dataclass
class MonitorSession:
    """Context object handed to every loop of a monitoring session.

    ``stop`` is one-shot: once set it is never cleared, and a new session
    gets a new object.
    """

    title: str
    config: MonitorConfig = field(default_factory=MonitorConfig)
    clock: Callable[[], float] = time.monotonic
    store: RecordStore = field(default_factory=RecordStore)
    paused: PauseFlag = field(default_factory=PauseFlag)
    stop: threading.Event = field(default_factory=threading.Event)
    status_log: StatusLog = field(init=False)

    def __post_init__(self) -> None:
        self.status_log = StatusLog(ttl=self.config.message_ttl, clock=self.clock)

    @property
    def stopped(self) -> bool:
        return self.stop.is_set()

    def request_stop(self) -> None:
        self.stop.set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True early if stop was requested."""
        return self.stop.wait(seconds)
