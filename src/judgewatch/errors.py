"""Error types raised by the monitor and its collaborators."""

from __future__ import annotations


class JudgewatchError(Exception):
    pass


class FatalSessionError(JudgewatchError):
    """Ends the owning loop and, through the coordinator, the whole session."""


class NetworkError(FatalSessionError):
    pass


class FormatError(FatalSessionError):
    pass


class TerminalUnavailable(FatalSessionError):
    pass


class OpenError(JudgewatchError):
    """Opening a detail link failed. Shown in the footer, never fatal."""
