"""Runs the poller, renderer and input handler of one monitor session."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .config import MonitorConfig
from .keys import InputHandler, KeyReader, OpenUrl, open_url
from .poller import Poller
from .render import Renderer
from .screen import ConsoleScreen, Screen
from .session import MonitorSession
from .sources import RecordSource

Loop = Callable[[], None]


class SessionState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class LoopOutcome:
    name: str
    error: Exception | None = None


class Coordinator:
    """Starts every loop on its own thread and tears all of them down as
    soon as one finishes, the stop flag is set or the user interrupts.

    The session result is the outcome of the first loop to finish; an
    interrupt counts as a clean stop.
    """

    def __init__(self, session: MonitorSession, loops: dict[str, Loop]) -> None:
        self.session = session
        self.loops = loops
        self.state = SessionState.STARTING
        self.outcome: LoopOutcome | None = None
        self._done: queue.Queue[LoopOutcome] = queue.Queue()
        self._threads: list[threading.Thread] = []

    def _target(self, name: str, loop: Loop) -> Loop:
        def _run() -> None:
            outcome = LoopOutcome(name)
            try:
                loop()
            except Exception as exc:
                outcome = LoopOutcome(name, exc)
            finally:
                self._done.put(outcome)

        return _run

    def _wait_first(self) -> LoopOutcome | None:
        tick = self.session.config.tick
        while not self.session.stopped:
            try:
                return self._done.get(timeout=tick)
            except queue.Empty:
                continue
        return None

    def run(self) -> None:
        for name, loop in self.loops.items():
            thread = threading.Thread(
                target=self._target(name, loop),
                name=f"judgewatch-{name}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        self.state = SessionState.RUNNING

        interrupted = False
        try:
            first = self._wait_first()
        except KeyboardInterrupt:
            interrupted = True
            first = LoopOutcome("interrupt")

        self.state = SessionState.STOPPING
        self.session.request_stop()
        for thread in self._threads:
            # A second Ctrl-C while a fetch winds down must not skip the join.
            while thread.is_alive():
                try:
                    thread.join()
                except KeyboardInterrupt:
                    continue
        self.state = SessionState.STOPPED

        if first is None and not interrupted:
            # Stop was requested by a loop; every loop has reported by now.
            first = self._done.get_nowait()
        self.outcome = first
        if first is not None and first.error is not None:
            raise first.error


def run_monitor(
    source: RecordSource,
    config: MonitorConfig,
    *,
    screen: Screen | None = None,
    reader: KeyReader | None = None,
    opener: OpenUrl = open_url,
) -> None:
    """Monitor ``source`` until the user quits or a loop fails."""
    session = MonitorSession(title=source.title(), config=config)
    screen = screen or ConsoleScreen()
    poller = Poller(session, source.fetch)
    renderer = Renderer(session, screen)

    with reader or KeyReader() as keys, screen.activate():
        handler = InputHandler(session, keys, opener=opener)
        Coordinator(
            session,
            {
                "poller": poller.run,
                "renderer": renderer.run,
                "input": handler.run,
            },
        ).run()
