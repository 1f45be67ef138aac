"""Shell completion protocols and how to pick one for a given prompt.

Shells do not agree on how to print their completions without touching the
command line. Three families are supported, plus a generic fallback:

- ``bash``: readline's ``insert-completions`` puts every match on the line,
  which is then wrapped in ``echo '...'`` and executed so the matches get
  printed.
- ``zsh`` and ``csh``: the listing is printed right away, or after a "list all
  N possibilities?" question which is answered with ``y``.
- ``generic``: press the listing key, then answer ``y`` in case it asks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .constants import DISCARD_LINE, SHELL_FAMILIES

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = [
    "STYLE_PROTOCOLS",
    "Style",
    "StyleProtocol",
    "StyleRule",
    "resolve_style",
]

CONFIRM_CHAR = "y"

# Opening of the echo wrapper typed around the bash line
ECHO_OPENER = "echo '"


class Style(StrEnum):
    """Completion protocol understood by the shell."""

    BASH = "bash"
    ZSH = "zsh"
    CSH = "csh"
    GENERIC = "generic"


@dataclass(frozen=True)
class StyleProtocol:
    """Everything that differs between styles.

    Attributes:
        suffix: keys appended to the line to provoke the listing
        confirm: character answering the shell's confirmation query, if any
        echo_wrapper: the listing is printed by an executed ``echo '...'`` command
        discard: keys emptying the line editor once the listing is captured
    """

    suffix: str
    confirm: str | None = None
    echo_wrapper: bool = False
    discard: str = DISCARD_LINE


STYLE_PROTOCOLS: dict[Style, StyleProtocol] = {
    # M-* inserts all matches, then C-a echo ' C-e ' RET prints them
    Style.BASH: StyleProtocol(suffix=f"\x1b*\x01{ECHO_OPENER}\x05'\n", echo_wrapper=True, discard=""),
    Style.ZSH: StyleProtocol(suffix=CONFIRM_CHAR, confirm=CONFIRM_CHAR),
    Style.CSH: StyleProtocol(suffix=CONFIRM_CHAR, confirm=CONFIRM_CHAR),
    Style.GENERIC: StyleProtocol(suffix="\t" + CONFIRM_CHAR, confirm=CONFIRM_CHAR),
}


@dataclass(frozen=True)
class StyleRule:
    """Force `style` when the prompt ends with `pattern`."""

    pattern: str
    style: Style

    def matches(self, prompt_text: str) -> bool:
        """Tell if the rule's pattern matches right before the line."""
        return re.search(f"(?:{self.pattern})\\Z", prompt_text) is not None


def resolve_style(prompt_text: str, rules: Iterable[StyleRule] = (), program: str = "") -> Style:
    """Pick the completion style for the current prompt.

    Explicit rules win over the shell name, which wins over the default.

    Args:
        prompt_text: text preceding the line being completed
        rules: ordered (pattern, style) rules
        program: the shell's executable name or path

    Returns:
        The resolved style
    """
    for rule in rules:
        if rule.matches(prompt_text):
            return rule.style
    for family in SHELL_FAMILIES:
        if family in program:
            return Style(family)
    return Style.GENERIC
