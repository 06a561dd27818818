"""Terminal output used by the renderer.

The renderer only talks to ``Screen``; ``ConsoleScreen`` is the real
terminal backed by a rich ``Console``.
"""

from __future__ import annotations

import os
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Iterator

from rich.console import Console
from rich.control import Control, ControlType
from rich.text import Text

from .errors import TerminalUnavailable


class Screen:
    def size(self) -> tuple[int, int]:
        """Return ``(width, height)`` or raise ``TerminalUnavailable``."""
        raise NotImplementedError

    def frame(self) -> ContextManager[None]:
        """Group the writes of one redraw into a single update."""
        raise NotImplementedError

    def activate(self) -> ContextManager[object]:
        """Prepare the terminal for a session and restore it afterwards."""
        return nullcontext()

    def clear(self) -> None:
        raise NotImplementedError

    def write_line(self, row: int, text: Text) -> None:
        raise NotImplementedError

    def clear_line(self, row: int) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        raise NotImplementedError


class ConsoleScreen(Screen):
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def size(self) -> tuple[int, int]:
        try:
            fd = self.console.file.fileno()
            columns, lines = os.get_terminal_size(fd)
        except (AttributeError, OSError, ValueError) as exc:
            raise TerminalUnavailable("Failed to get terminal size") from exc
        return columns, lines

    @contextmanager
    def frame(self) -> Iterator[None]:
        # Console buffers everything written inside its context and emits it
        # in one write on exit.
        with self.console:
            yield

    def activate(self) -> ContextManager[object]:
        """Alternate screen with hidden cursor for the lifetime of a session."""
        return self.console.screen(hide_cursor=True)

    def clear(self) -> None:
        self.console.control(Control.clear())

    def write_line(self, row: int, text: Text) -> None:
        self.console.control(Control.move_to(0, row))
        self.console.print(text, end="", soft_wrap=True)

    def clear_line(self, row: int) -> None:
        self.console.control(
            Control.move_to(0, row),
            Control((ControlType.ERASE_IN_LINE, 2)),
        )

    def flush(self) -> None:
        self.console.file.flush()
