"""Keyboard control of a running monitor session."""

from __future__ import annotations

import os
import select
import sys
import termios
import tty
import webbrowser
from typing import IO, Any, Callable

from .errors import OpenError
from .session import MonitorSession

INTERRUPT = 3

OpenUrl = Callable[[str], None]


def open_url(url: str) -> None:
    """Open ``url`` in a new browser tab without blocking.

    Console browsers (lynx, w3m and other plain `GenericBrowser` commands)
    run in the foreground on this terminal, so they are refused.
    """
    try:
        browser = webbrowser.get()
        if type(browser) is webbrowser.GenericBrowser:
            raise OpenError(f"only a console browser is available: {browser.name}")
        opened = browser.open(url, new=2)
    except webbrowser.Error as exc:
        raise OpenError(str(exc)) from exc
    if not opened:
        raise OpenError("no browser available")


class KeyReader:
    """Byte-at-a-time reader over stdin with a read timeout.

    Used as a context manager it switches a terminal stdin to cbreak mode
    and restores the previous settings on exit. A non-terminal stdin is read
    as is.
    """

    def __init__(self, stream: IO[Any] | None = None) -> None:
        self.stream = stream or sys.stdin
        self._fd = self.stream.fileno()
        self._saved: list | None = None
        self.closed = False

    def __enter__(self) -> KeyReader:
        try:
            self._saved = termios.tcgetattr(self._fd)
        except termios.error:
            self._saved = None
        if self._saved is not None:
            tty.setcbreak(self._fd)
        return self

    def __exit__(self, *exc: object) -> None:
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def read_byte(self, timeout: float) -> int | None:
        """Return the next byte, or None when nothing arrived in time."""
        if self.closed:
            return None
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self._fd, 1)
        if not data:
            self.closed = True
            return None
        return data[0]


class InputHandler:
    def __init__(
        self,
        session: MonitorSession,
        reader: KeyReader,
        *,
        opener: OpenUrl = open_url,
    ) -> None:
        self.session = session
        self.reader = reader
        self.opener = opener

    def handle_key(self, key: int) -> bool:
        """Apply one keystroke. Returns False when the session should stop."""
        session = self.session
        if key in (ord("q"), INTERRUPT):
            session.request_stop()
            return False
        if key == ord("p"):
            session.paused.toggle()
        elif ord("0") <= key <= ord("9"):
            self.open_detail(key - ord("0"))
        return True

    def open_detail(self, digit: int) -> None:
        """Open the detail link of the ``digit``-th most recent record.

        ``1`` is the newest record and ``0`` the tenth newest.
        """
        session = self.session
        records = session.store.snapshot()
        index = len(records) - (10 if digit == 0 else digit)
        if index < 0:
            session.status_log.warning("Invalid index")
            return
        url = records[index].detail
        try:
            self.opener(url)
        except OpenError as exc:
            session.status_log.error(f"Failed to open URL: {exc}")
        else:
            session.status_log.info(f"Opening submission detail: {url}")

    def run(self) -> None:
        session = self.session
        timeout = session.config.tick
        while not session.stopped:
            if self.reader.closed:
                # Nothing more will arrive; leave stopping to the other loops.
                session.wait(timeout)
                continue
            key = self.reader.read_byte(timeout)
            if key is None:
                continue
            if not self.handle_key(key):
                break
