"""Monitor settings and contest URL resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env(name: str) -> str | None:
    val = os.environ.get(name)
    if val:
        return val
    return None


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


@dataclass(frozen=True)
class MonitorConfig:
    poll_interval: float = 5.0
    tick: float = 0.1
    idle_warning: float = 59 * 60
    idle_pause: float = 60 * 60
    message_ttl: float = 1.0
    recent_change: float = 5.0
    base_url: str = "https://atcoder.jp"
    feed_path: str = "/submissions/me/json"
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> MonitorConfig:
        defaults = cls()
        return cls(
            poll_interval=_env_float("JUDGEWATCH_POLL_INTERVAL", defaults.poll_interval),
            tick=_env_float("JUDGEWATCH_TICK", defaults.tick),
            idle_warning=_env_float("JUDGEWATCH_IDLE_WARNING", defaults.idle_warning),
            idle_pause=_env_float("JUDGEWATCH_IDLE_PAUSE", defaults.idle_pause),
            base_url=(_env("JUDGEWATCH_BASE_URL") or defaults.base_url).rstrip("/"),
            feed_path=_env("JUDGEWATCH_FEED_PATH") or defaults.feed_path,
            request_timeout=_env_float(
                "JUDGEWATCH_REQUEST_TIMEOUT", defaults.request_timeout
            ),
        )


def contest_url_for(target: str, base_url: str) -> str:
    """Accept either a full contest URL or a bare contest id."""
    target = target.strip()
    if target.startswith(("http://", "https://")):
        return target.rstrip("/")
    return f"{base_url}/contests/{target}"


def infer_contest_url(base_url: str, cwd: Path | None = None) -> str:
    """Contest workspaces are conventionally named after the contest id."""
    directory = cwd or Path.cwd()
    return contest_url_for(directory.name, base_url)
