"""ANSI helpers for the screen log formatter.

Honors NO_COLOR / FORCE_COLOR and only colors TTY streams.
"""

import os
import sys
from typing import TextIO

__all__ = [
    "LogStyles",
    "make_style",
    "should_colorize",
]

_ESC = "\x1b["

RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"

RED = "31"
YELLOW = "33"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell whether log records written to `stream` may carry colors.

    Args:
        stream: The output stream to check. Defaults to sys.stderr.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair wrapping text in `codes`."""
    if not codes:
        return ("", RESET)
    return (f"{_ESC}{';'.join(codes)}m", RESET)


class LogStyles:
    """Styles per log level."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)
