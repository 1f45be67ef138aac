"""Turn the shell's raw terminal answer into whitespace separated tokens.

Each step is a plain text rewrite, applied in the order of `normalize_output`.
"""

import re

from .ansi import strip_ansi
from .styles import StyleProtocol

__all__ = [
    "cut_first_paragraph",
    "drop_carriage_returns",
    "normalize_output",
    "remove_confirmation_queries",
    "drop_prompt_line",
    "remove_echo_command",
    "remove_line_echoes",
    "separate_confirmation",
    "strip_command_stem",
]

CONFIRMATION_QUERY_RE = re.compile(r"^.*\?\s*(?:\[y/n\]|\[n/y\]|\(y or n\)|\(n or y\)).*$\n?", re.MULTILINE)


def drop_carriage_returns(text: str) -> str:
    """Normalize terminal line endings to plain newlines."""
    return text.replace("\r\n", "\n").replace("\r", "")


def separate_confirmation(text: str, line: str, confirm: str) -> str:
    """Split a confirmation char glued to the end of the echoed line.

    When the only match is inserted without a trailing space (directories
    typically), the answer to the query lands right after it.
    """
    if not line:
        return text
    pattern = re.compile(rf"^({re.escape(line)}\S*?){re.escape(confirm)}$", re.MULTILINE)
    return pattern.sub(rf"\1 {confirm}", text)


def cut_first_paragraph(text: str) -> str:
    """Drop everything after the first blank line (redisplayed prompt...)."""
    return text.split("\n\n", 1)[0]


def remove_line_echoes(text: str, line: str) -> str:
    """Remove lines where the shell retyped the command."""
    if not line:
        return text
    return re.sub(rf"^{re.escape(line)}\S*$\n?", "", text, flags=re.MULTILINE)


def remove_echo_command(text: str) -> str:
    """Keep only what the ``echo '...'`` command printed.

    The executed command is the first line ending with the closing quote,
    the line editor's redraws all land on that same terminal line.
    """
    _, sep, tail = text.partition("'\n")
    return tail if sep else text


def drop_prompt_line(text: str, prompt: str) -> str:
    """Remove the last line when it is the redisplayed prompt."""
    head, _, last = text.rpartition("\n")
    if re.search(f"(?:{prompt})\\Z", last):
        return head
    return text


def remove_confirmation_queries(text: str) -> str:
    """Remove "display all N possibilities? (y or n)" like lines."""
    return CONFIRMATION_QUERY_RE.sub("", text)


def strip_command_stem(text: str, line: str, prefix: str) -> str:
    """Remove one leading copy of the line without its prefix."""
    stem = line[: len(line) - len(prefix)]
    text = text.lstrip()
    if stem and text.startswith(stem):
        return text[len(stem) :]
    return text


def normalize_output(
    raw: str,
    line: str,
    prefix: str,
    protocol: StyleProtocol,
    first_paragraph_only: bool = True,
    prompt: str | None = None,
) -> list[str]:
    """Clean the captured output and split it into tokens.

    Args:
        raw: everything the shell printed after the trigger was sent
        line: the line being completed
        prefix: pending part of the last word
        protocol: completion protocol used for this request
        first_paragraph_only: stop at the first blank line
        prompt: regex of the shell prompt, a trailing prompt line is dropped

    Returns:
        The tokens, in order of appearance
    """
    text = drop_carriage_returns(raw)
    if protocol.confirm:
        text = separate_confirmation(text, line, protocol.confirm)
    if first_paragraph_only:
        text = cut_first_paragraph(text)
    text = strip_ansi(text)
    text = remove_line_echoes(text, line)
    if protocol.echo_wrapper:
        text = remove_echo_command(text)
    text = remove_confirmation_queries(text)
    if prompt:
        text = drop_prompt_line(text, prompt)
    text = strip_command_stem(text, line, prefix)
    return text.split()
