from __future__ import annotations

import os
import threading
import webbrowser
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from judgewatch.config import MonitorConfig
from judgewatch.errors import OpenError
from judgewatch.keys import INTERRUPT, InputHandler, KeyReader, open_url
from judgewatch.records import Record, Status
from judgewatch.session import MonitorSession
from judgewatch.status_log import Severity


def _record(record_id: int) -> Record:
    return Record(
        id=record_id,
        time=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
        problem=f"Problem {record_id}",
        language="Python",
        score=100,
        code_size="1 KB",
        status=Status.ACCEPTED,
        execution_time=None,
        memory=None,
        detail=f"https://example.com/submissions/{record_id}",
    )


class _ScriptedReader:
    def __init__(self, keys: bytes) -> None:
        self.keys = list(keys)
        self.closed = False

    def read_byte(self, timeout: float) -> int | None:
        if not self.keys:
            return None
        return self.keys.pop(0)


def _handler(count: int) -> tuple[InputHandler, MonitorSession, MagicMock]:
    session = MonitorSession(title="ABC 350", config=MonitorConfig(tick=0.01))
    session.store.upsert_batch([_record(i) for i in range(count)])
    opener = MagicMock()
    handler = InputHandler(session, _ScriptedReader(b""), opener=opener)
    return handler, session, opener


def test_digit_one_opens_newest_record() -> None:
    handler, session, opener = _handler(12)

    assert handler.handle_key(ord("1")) is True

    opener.assert_called_once_with("https://example.com/submissions/11")
    entry = session.status_log.latest()
    assert entry is not None
    assert entry.severity is Severity.INFO
    assert entry.text == "Opening submission detail: https://example.com/submissions/11"


def test_digit_zero_opens_tenth_newest_record() -> None:
    handler, _session, opener = _handler(12)

    handler.handle_key(ord("0"))

    opener.assert_called_once_with("https://example.com/submissions/2")


@pytest.mark.parametrize("digit, position", [(1, 4), (3, 2), (5, 0)])
def test_digits_map_to_positions_from_the_end(digit: int, position: int) -> None:
    handler, _session, opener = _handler(5)

    handler.handle_key(ord(str(digit)))

    opener.assert_called_once_with(f"https://example.com/submissions/{position}")


@pytest.mark.parametrize("digit", ["6", "9", "0"])
def test_out_of_range_digit_warns(digit: str) -> None:
    handler, session, opener = _handler(5)

    assert handler.handle_key(ord(digit)) is True

    opener.assert_not_called()
    entry = session.status_log.latest()
    assert entry is not None
    assert entry.severity is Severity.WARNING
    assert entry.text == "Invalid index"


def test_open_failure_is_logged_not_raised() -> None:
    handler, session, opener = _handler(3)
    opener.side_effect = OpenError("no browser available")

    handler.handle_key(ord("1"))

    entry = session.status_log.latest()
    assert entry is not None
    assert entry.severity is Severity.ERROR
    assert entry.text == "Failed to open URL: no browser available"


def test_p_toggles_pause() -> None:
    handler, session, _opener = _handler(0)

    handler.handle_key(ord("p"))
    assert session.paused.is_set()
    handler.handle_key(ord("p"))
    assert not session.paused.is_set()


@pytest.mark.parametrize("key", [ord("q"), INTERRUPT])
def test_quit_keys_request_stop(key: int) -> None:
    handler, session, _opener = _handler(0)

    assert handler.handle_key(key) is False
    assert session.stopped


def test_other_keys_are_ignored() -> None:
    handler, session, opener = _handler(3)

    assert handler.handle_key(ord("x")) is True

    opener.assert_not_called()
    assert session.status_log.latest() is None
    assert not session.paused.is_set()
    assert not session.stopped


def test_run_processes_keys_until_quit() -> None:
    session = MonitorSession(title="ABC 350", config=MonitorConfig(tick=0.01))
    session.store.upsert_batch([_record(0)])
    opener = MagicMock()
    handler = InputHandler(session, _ScriptedReader(b"p1q"), opener=opener)

    handler.run()

    assert session.paused.is_set()
    assert session.stopped
    opener.assert_called_once_with("https://example.com/submissions/0")


def test_run_exits_on_external_stop() -> None:
    session = MonitorSession(title="ABC 350", config=MonitorConfig(tick=0.01))
    handler = InputHandler(session, _ScriptedReader(b""), opener=MagicMock())

    thread = threading.Thread(target=handler.run)
    thread.start()
    session.request_stop()
    thread.join(timeout=2)

    assert not thread.is_alive()


def test_key_reader_reads_bytes_from_pipe() -> None:
    read_fd, write_fd = os.pipe()
    with os.fdopen(read_fd, "rb") as stream, KeyReader(stream) as reader:
        assert reader.read_byte(0.01) is None
        os.write(write_fd, b"pq")
        assert reader.read_byte(1.0) == ord("p")
        assert reader.read_byte(1.0) == ord("q")
        os.close(write_fd)
        assert reader.read_byte(1.0) is None
        assert reader.closed


def test_open_url_raises_when_no_browser() -> None:
    with patch("judgewatch.keys.webbrowser.get", side_effect=webbrowser.Error("none")):
        with pytest.raises(OpenError, match="none"):
            open_url("https://example.com")


def test_open_url_raises_when_browser_fails() -> None:
    browser = MagicMock()
    browser.open.return_value = False
    with patch("judgewatch.keys.webbrowser.get", return_value=browser):
        with pytest.raises(OpenError):
            open_url("https://example.com")


def test_open_url_refuses_console_browser() -> None:
    lynx = webbrowser.GenericBrowser("lynx")
    with patch("judgewatch.keys.webbrowser.get", return_value=lynx):
        with patch.object(lynx, "open") as mock_open:
            with pytest.raises(OpenError, match="lynx"):
                open_url("https://example.com")

    mock_open.assert_not_called()


def test_open_url_uses_new_tab() -> None:
    browser = MagicMock()
    browser.open.return_value = True
    with patch("judgewatch.keys.webbrowser.get", return_value=browser):
        open_url("https://example.com/submissions/1")

    browser.open.assert_called_once_with("https://example.com/submissions/1", new=2)
