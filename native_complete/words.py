"""Split the line being completed into its stable and pending parts."""

import re
from dataclasses import dataclass

from .models import PromptNotRecognizedError

__all__ = ["WordSplit", "check_prompt", "split_line"]


@dataclass(frozen=True)
class WordSplit:
    """Boundaries of the word being completed.

    `common` is the already typed part the shell echoes back unchanged,
    `prefix` the part every candidate has to start with.
    """

    common: str
    prefix: str
    split_point: int


def check_prompt(prompt_text: str, prompt_pattern: str) -> None:
    """Make sure the text preceding the line ends with the shell prompt.

    Raises:
        PromptNotRecognizedError: if `prompt_pattern` doesn't match at the end of `prompt_text`
    """
    if re.search(f"(?:{prompt_pattern})\\Z", prompt_text) is None:
        raise PromptNotRecognizedError(prompt_text, prompt_pattern)


def split_line(line: str) -> WordSplit:
    """Split `line` on the last word, variable or path boundary.

    Eg:
        split_line("ls fo") == WordSplit(common="", prefix="fo", split_point=3)
        split_line("cd /usr/lo") == WordSplit(common="/usr/", prefix="lo", split_point=8)
    """
    word_start = line.rfind(" ")
    env_start = line.rfind("$")
    path_start = line.rfind("/")
    split_point = max(word_start, env_start, path_start) + 1
    return WordSplit(
        common=line[word_start + 1 : split_point],
        prefix=line[split_point:],
        split_point=split_point,
    )
