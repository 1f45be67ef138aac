"""ANSI terminal escape helpers.

Two directions are covered here: building color codes for our own log and CLI
output (honoring NO_COLOR and TTY detection), and removing the escape
sequences a shell sprinkles over its terminal output.
"""

import os
import re
import sys
from typing import TextIO

__all__ = [
    "BOLD",
    "DIM",
    "GREEN",
    "RED",
    "RESET",
    "YELLOW",
    "LogStyles",
    "colorize",
    "make_style",
    "should_colorize",
    "strip_ansi",
]

# ANSI escape sequence prefix
_ESC = "\x1b["

# Reset all attributes
RESET = f"{_ESC}0m"

# Style codes
BOLD = "1"
DIM = "2"

# Foreground color codes
RED = "31"
GREEN = "32"
YELLOW = "33"

# CSI (colors, cursor motion, erase), OSC (window titles, cwd reports) and
# the remaining two-byte escapes (keypad modes, charset selection...)
_ESCAPE_RE = re.compile(
    r"""
    \x1b\[[0-?]*[\x20-/]*[@-~]          # CSI
    | \x1b\][^\x07\x1b]*(?:\x07|\x1b\\)  # OSC, BEL or ST terminated
    | \x1b[()][0-9A-Za-z]                # charset designation
    | \x1b[=>78DEHMNOZc]                 # short escapes
    """,
    re.VERBOSE,
)


def should_colorize(stream: TextIO | None = None) -> bool:
    """Determine if ANSI colors should be used for the given stream.

    Respects:
    - NO_COLOR environment variable (disables colors)
    - FORCE_COLOR environment variable (forces colors)
    - TTY detection (disables colors when piping)

    Args:
        stream: The output stream to check. Defaults to sys.stderr.

    Returns:
        True if colors should be used, False otherwise.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, *codes: str) -> str:
    """Wrap text in ANSI color codes.

    Args:
        text: The text to colorize.
        *codes: ANSI codes to apply (e.g., RED, BOLD).

    Returns:
        The text wrapped in ANSI escape sequences.
    """
    if not codes:
        return text
    return f"{_ESC}{';'.join(codes)}m{text}{RESET}"


def make_style(*codes: str) -> tuple[str, str]:
    """Create a style prefix and suffix pair."""
    if not codes:
        return ("", RESET)
    return (f"{_ESC}{';'.join(codes)}m", RESET)


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from `text`.

    Args:
        text: Raw terminal output

    Returns:
        The text without color, cursor or title sequences
    """
    return _ESCAPE_RE.sub("", text)


class LogStyles:
    """Pre-built styles for log levels."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)
