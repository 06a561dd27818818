"""Screen layout for the live submission view."""

from __future__ import annotations

import re
import time
from typing import Callable

from rich.cells import cell_len, set_cell_size
from rich.text import Text

from .records import Record, Status, StatusGroup
from .screen import Screen
from .session import MonitorSession
from .status_log import LogEntry, Severity

SPINNER = "|/-\\"
RUNNING_HINT = "Running | {p} to pause, {q} to quit, {0-9} to open submission detail"
PAUSED_HINT = "  Paused | {p} to resume, {q} to quit, {0-9} to open submission detail"
STOPPING_TEXT = "Stopping..."

HOTKEY_ROWS = 10
PROBLEM_WIDTH = 30
GRAY = "bright_black"
ELLIPSIS = "..."

GROUP_STYLES: dict[StatusGroup, str] = {
    StatusGroup.SUCCESS: "green",
    StatusGroup.IN_PROGRESS: GRAY,
    StatusGroup.FAILURE: "yellow",
    StatusGroup.INTERNAL_ERROR: "red",
}

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.INFO: "blue",
    Severity.WARNING: "yellow",
}

_KEY_RE = re.compile(r"\{([^}]*)\}")


def _pad_cells(s: str, n: int) -> str:
    """Fit ``s`` into exactly ``n`` terminal cells, cutting with an ellipsis."""
    if cell_len(s) <= n or n <= len(ELLIPSIS):
        return set_cell_size(s, n)
    return set_cell_size(s, n - len(ELLIPSIS)) + ELLIPSIS


def _fit(text: Text, width: int) -> Text:
    # The last column stays empty so the cursor never wraps to the next row.
    limit = max(width - 1, 0)
    if text.cell_len <= limit:
        return text
    if limit <= len(ELLIPSIS):
        text.truncate(limit, overflow="crop")
        return text
    text.truncate(limit - len(ELLIPSIS), overflow="crop")
    text.append(ELLIPSIS)
    return text


def hotkey_label(position: int) -> str | None:
    """Digit bound to the row ``position`` places from the newest, if any."""
    if 0 <= position < HOTKEY_ROWS:
        return str((position + 1) % 10)
    return None


def hint_text(template: str) -> Text:
    """Render ``{key}`` markers bold and everything else gray."""
    text = Text()
    last = 0
    for m in _KEY_RE.finditer(template):
        if m.start() > last:
            text.append(template[last : m.start()], style=GRAY)
        text.append(m.group(1), style="bold")
        last = m.end()
    if last < len(template):
        text.append(template[last:], style=GRAY)
    return text


def title_text(title: str, width: int) -> Text:
    return _fit(Text(title, style="bold"), width)


def footer_text(
    *,
    entry: LogEntry | None,
    paused: bool,
    frame: int,
    width: int,
) -> Text:
    if entry is not None:
        text = Text(
            f"{entry.severity.value}: {entry.text}",
            style=SEVERITY_STYLES[entry.severity],
        )
    elif paused:
        text = hint_text(PAUSED_HINT)
    else:
        text = Text(SPINNER[frame % len(SPINNER)] + " ", style=GRAY)
        text.append_text(hint_text(RUNNING_HINT))
    return _fit(text, width)


def record_row(record: Record, *, position: int, recent: bool, width: int) -> Text:
    text = Text()
    label = hotkey_label(position)
    if label is None:
        text.append("    ")
    else:
        text.append("[")
        text.append(label, style="bold")
        text.append("] ")

    status = record.status
    text.append(f"{status.code:>3}: ", style=GROUP_STYLES[status.group])

    if status.in_progress:
        row_style: str | None = GRAY
    elif recent:
        row_style = "bold"
    else:
        row_style = None

    local_time = record.time.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    body = (
        f"{local_time}"
        f" | {_pad_cells(record.problem, PROBLEM_WIDTH)}"
        f" | {record.score:>4}pts"
    )
    if record.execution_time is not None:
        body += f" | {record.execution_time:>10}"
    text.append(body, style=row_style)
    return _fit(text, width)


class TransitionTracker:
    """Remembers when each record last changed status between redraws."""

    def __init__(
        self,
        window: float = 5.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = window
        self._clock = clock
        self._last_status: dict[int, Status] = {}
        self._changed_at: dict[int, float] = {}

    def observe(self, record: Record) -> None:
        prev = self._last_status.get(record.id)
        if prev is not None and prev != record.status:
            self._changed_at[record.id] = self._clock()
        self._last_status[record.id] = record.status

    def recently_changed(self, record_id: int) -> bool:
        changed = self._changed_at.get(record_id)
        if changed is None:
            return False
        return self._clock() - changed < self.window


class Renderer:
    def __init__(self, session: MonitorSession, screen: Screen) -> None:
        self.session = session
        self.screen = screen
        self.frames = 0
        self.tracker = TransitionTracker(
            session.config.recent_change, clock=session.clock
        )

    def draw(self) -> None:
        session = self.session
        width, height = self.screen.size()
        records = session.store.snapshot()
        entry = session.status_log.fresh()
        paused = session.paused.is_set()

        with self.screen.frame():
            self.screen.clear()
            if height > 1:
                self.screen.write_line(0, title_text(session.title, width))
            self.screen.write_line(
                height - 1,
                footer_text(entry=entry, paused=paused, frame=self.frames, width=width),
            )
            for position in range(max(height - 2, 0)):
                index = len(records) - 1 - position
                if index < 0:
                    break
                record = records[index]
                self.tracker.observe(record)
                row = record_row(
                    record,
                    position=position,
                    recent=self.tracker.recently_changed(record.id),
                    width=width,
                )
                self.screen.write_line(height - 2 - position, row)
        self.screen.flush()
        self.frames += 1

    def draw_stopping(self) -> None:
        width, height = self.screen.size()
        with self.screen.frame():
            self.screen.clear_line(height - 1)
            self.screen.write_line(height - 1, _fit(Text(STOPPING_TEXT), width))
        self.screen.flush()

    def run(self) -> None:
        session = self.session
        while not session.stopped:
            self.draw()
            if session.wait(session.config.tick):
                break
        self.draw_stopping()
