"""Record sources the poller can fetch from."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from .config import MonitorConfig
from .errors import FormatError, NetworkError
from .records import Record, Status


class RecordSource:
    name: str

    def title(self) -> str:
        raise NotImplementedError

    def fetch(self) -> list[Record]:
        """Return the complete current list of records, oldest first."""
        raise NotImplementedError


_DEMO_CYCLE = (
    Status.ACCEPTED,
    Status.WAITING_JUDGE,
    Status.JUDGING,
    Status.WAITING_REJUDGE,
    Status.WRONG_ANSWER,
    Status.TIME_LIMIT_EXCEEDED,
    Status.MEMORY_LIMIT_EXCEEDED,
    Status.RUNTIME_ERROR,
    Status.COMPILE_ERROR,
    Status.OUTPUT_LIMIT_EXCEEDED,
    Status.INTERNAL_ERROR,
)


class DemoSource(RecordSource):
    """Synthetic submissions whose statuses rotate on every fetch."""

    name = "demo"

    def __init__(self, count: int = 100, *, start: datetime | None = None) -> None:
        self.count = count
        self.start = start or datetime.now(timezone.utc)
        self.counter = 0

    def title(self) -> str:
        return "Dummy Contest"

    def fetch(self) -> list[Record]:
        self.counter += 1
        records = []
        for i in range(self.count):
            even = i % 2 == 0
            records.append(
                Record(
                    id=i,
                    time=self.start + timedelta(seconds=i),
                    problem=f"Problem {i}",
                    language="Python",
                    score=i * 100,
                    code_size="1 KB",
                    status=_DEMO_CYCLE[(i + self.counter) % len(_DEMO_CYCLE)],
                    execution_time="100ms" if even else None,
                    memory="100MB" if even else None,
                    detail="https://example.com",
                )
            )
        return records


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def record_from_dict(item: dict[str, Any]) -> Record:
    try:
        raw_time = item["time"]
        if not isinstance(raw_time, str):
            raise TypeError(f"time must be a string, got {type(raw_time).__name__}")
        when = datetime.fromisoformat(raw_time.replace("Z", "+00:00"))
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return Record(
            id=int(item["id"]),
            time=when,
            problem=str(item["problem"]),
            language=str(item.get("language") or ""),
            score=int(item.get("score") or 0),
            code_size=str(item.get("code_size") or ""),
            status=Status.parse(str(item["status"])),
            execution_time=_optional_str(item.get("execution_time")),
            memory=_optional_str(item.get("memory")),
            detail=str(item["detail"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise FormatError(f"Malformed submission record: {exc}") from exc


class JsonFeedSource(RecordSource):
    """Reads already-structured submissions from an HTTP JSON feed.

    The feed body is ``{"title": str, "records": [...]}`` with records
    listed oldest first.
    """

    name = "json"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.http = session or requests.Session()
        self._title: str | None = None

    def _get(self) -> dict[str, Any]:
        try:
            resp = self.http.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(f"Failed to fetch {self.url}: {exc}") from exc
        try:
            payload = resp.json()
        except ValueError as exc:
            raise FormatError(f"Response from {self.url} is not JSON") from exc
        if not isinstance(payload, dict):
            raise FormatError("JSON feed must be an object")
        return payload

    def _records(self, payload: dict[str, Any]) -> list[Record]:
        items = payload.get("records")
        if not isinstance(items, list):
            raise FormatError("JSON feed has no 'records' list")
        records = []
        for item in items:
            if not isinstance(item, dict):
                raise FormatError("Each submission record must be an object")
            records.append(record_from_dict(item))
        return records

    def title(self) -> str:
        if self._title is None:
            payload = self._get()
            self._title = str(payload.get("title") or self.url)
        return self._title

    def fetch(self) -> list[Record]:
        payload = self._get()
        if self._title is None and payload.get("title"):
            self._title = str(payload["title"])
        return self._records(payload)


_SOURCES = ("demo", "json")


def get_source(name: str, contest_url: str, config: MonitorConfig) -> RecordSource:
    if name == "demo":
        return DemoSource()
    if name == "json":
        return JsonFeedSource(
            contest_url + config.feed_path,
            timeout=config.request_timeout,
        )
    raise ValueError(f"unknown source: {name!r} (available: {list(_SOURCES)})")
