"""CLI entry point for judgewatch."""

from __future__ import annotations

import argparse
import sys

from . import __version__, log
from .config import MonitorConfig, contest_url_for, infer_contest_url
from .monitor import run_monitor
from .sources import get_source


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="judgewatch",
        description="Monitor your submissions in a contest.",
    )
    p.add_argument(
        "contest",
        nargs="?",
        default=None,
        help="Contest URL or id. Inferred from the current directory if omitted.",
    )
    p.add_argument("--source", default="json", choices=["json", "demo"])
    p.add_argument("--version", action="version", version=f"judgewatch {__version__}")
    return p


def cmd_monitor(args: argparse.Namespace, config: MonitorConfig) -> int:
    if args.contest:
        contest_url = contest_url_for(args.contest, config.base_url)
    else:
        contest_url = infer_contest_url(config.base_url)
        log.info(f"Inferred contest URL: {contest_url}")

    source = get_source(args.source, contest_url, config)
    log.debug(f"Config: {config}")
    log.info(f"Monitoring contest {contest_url}")
    run_monitor(source, config)
    log.info("Goodbye!")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    config = MonitorConfig.from_env()
    try:
        code = cmd_monitor(args, config)
    except KeyboardInterrupt:
        log.info("Goodbye!")
        code = 0
    except Exception as exc:
        sys.stdout.flush()
        log.error(str(exc) or type(exc).__name__)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
