"""Background loop that keeps the record store in sync with the remote list."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Sequence

from .records import Record
from .session import MonitorSession

FetchRecords = Callable[[], Sequence[Record]]


def idle_warning_text(seconds: float) -> str:
    seconds = int(seconds)
    if seconds % 60 == 0:
        n, unit = seconds // 60, "minute"
    else:
        n, unit = seconds, "second"
    plural = "" if n == 1 else "s"
    return f"No new submissions for {n} {unit}{plural}, will pause polling."


class IdleAction(str, Enum):
    WARN = "warn"
    PAUSE = "pause"


class IdleWatch:
    """Tracks how long the record count has stayed the same.

    Only the count is compared: status changes on existing records do not
    count as activity. The window restarts on a new count or after an
    auto-pause. Time spent paused is not counted.
    """

    def __init__(
        self,
        warning_after: float,
        pause_after: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.warning_after = warning_after
        self.pause_after = pause_after
        self._clock = clock
        self._count: int | None = None
        self._since = clock()
        self._paused_at: float | None = None
        self._warned = False

    def _reset(self, now: float) -> None:
        self._since = now
        self._paused_at = None
        self._warned = False

    def check(self, count: int, *, paused: bool) -> list[IdleAction]:
        now = self._clock()
        if count != self._count:
            self._count = count
            self._reset(now)
            return []
        if paused:
            if self._paused_at is None:
                self._paused_at = now
            return []
        if self._paused_at is not None:
            self._since += now - self._paused_at
            self._paused_at = None

        actions: list[IdleAction] = []
        idle = now - self._since
        if idle >= self.warning_after and not self._warned:
            self._warned = True
            actions.append(IdleAction.WARN)
        if idle >= self.pause_after:
            self._reset(now)
            actions.append(IdleAction.PAUSE)
        return actions


class Poller:
    def __init__(self, session: MonitorSession, fetch: FetchRecords) -> None:
        self.session = session
        self.fetch = fetch
        cfg = session.config
        self.idle = IdleWatch(cfg.idle_warning, cfg.idle_pause, clock=session.clock)
        self.fetches = 0

    def poll_once(self) -> None:
        records = self.fetch()
        self.session.store.upsert_batch(records)
        self.fetches += 1
        self.check_idle()

    def check_idle(self) -> None:
        session = self.session
        actions = self.idle.check(len(session.store), paused=session.paused.is_set())
        for action in actions:
            if action is IdleAction.WARN:
                session.status_log.warning(idle_warning_text(self.idle.warning_after))
            elif action is IdleAction.PAUSE:
                session.paused.set()

    def run(self) -> None:
        """Poll until stop is requested. Fetch errors end the loop."""
        session = self.session
        cfg = session.config
        while not session.stopped:
            if session.paused.is_set():
                self.check_idle()
                session.wait(cfg.tick)
                continue
            self.poll_once()
            if session.wait(cfg.poll_interval):
                break
