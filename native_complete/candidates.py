"""Pick the real candidates out of the normalized tokens."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .constants import DEFAULT_EXCLUDE

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = ["filter_candidates"]


def filter_candidates(
    tokens: Iterable[str],
    common: str,
    prefix: str,
    exclude: str | re.Pattern[str] = DEFAULT_EXCLUDE,
) -> list[str]:
    """Return the unique tokens completing `prefix`, in order of appearance.

    Tokens containing an excluded character are dropped, a leading `common`
    and a trailing ``*`` (executable marker) are removed before matching.

    Args:
        tokens: output of the normalizer
        common: stable part of the word being completed
        prefix: pending part every candidate must start with
        exclude: characters a candidate can't contain
    """
    exclude_re = re.compile(exclude) if isinstance(exclude, str) else exclude
    candidates: dict[str, None] = {}
    for token in tokens:
        if exclude_re.search(token):
            continue
        if common and token.startswith(common):
            token = token[len(common) :]
        token = token.removesuffix("*")
        if token and token.startswith(prefix):
            candidates.setdefault(token, None)
    return list(candidates)
