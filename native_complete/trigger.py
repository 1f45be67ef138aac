"""Build the keys sent to the shell."""

from .styles import STYLE_PROTOCOLS, Style

__all__ = ["build_trigger"]


def build_trigger(line: str, style: Style) -> str:
    """Return `line` followed by the keys provoking the listing for `style`."""
    return line + STYLE_PROTOCOLS[style].suffix
