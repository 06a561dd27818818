"""Prefixed status lines for output outside the live screen."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text

stdout = Console(highlight=False)
stderr = Console(stderr=True, highlight=False)


def _line(prefix: str, style: str, message: str) -> Text:
    text = Text(f"{prefix} ", style=style)
    text.append(message)
    return text


def debug(message: str) -> None:
    if os.environ.get("DEBUG"):
        stdout.print(_line("D)", "bold bright_black", message))


def info(message: str) -> None:
    stdout.print(_line("i)", "bold bright_blue", message))


def error(message: str) -> None:
    stderr.print(_line("X)", "bold bright_red", message))
