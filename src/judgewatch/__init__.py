"""Live terminal monitor for contest submissions."""

__version__ = "0.1.0"
