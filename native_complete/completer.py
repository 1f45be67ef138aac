"""Completion requests against a running shell.

A request goes through the following steps:

1. check the prompt, split the line, pick the style (no I/O)
2. send the trigger and capture the shell's answer
3. normalize the capture and filter the candidates (no I/O)

Nothing outlives a request but the configuration: the line, its split, the
style and the trigger live in a `RequestContext` built for each call.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .candidates import filter_candidates
from .capture import CaptureDispatcher
from .constants import DEFAULT_CONTEXTS, DEFAULT_EXCLUDE, DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT
from .logging_setup import get_logger
from .models import CaptureBusyError, ConfigError
from .normalize import normalize_output
from .schema import CONFIG_SCHEMA
from .styles import STYLE_PROTOCOLS, Style, StyleProtocol, StyleRule, resolve_style
from .trigger import build_trigger
from .validation import ConfigValidator
from .words import WordSplit, check_prompt, split_line

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from .channel import ShellChannel
    from .config import Configuration
    from .shell import PtyShell

__all__ = ["CompletionResult", "NativeCompleter", "RequestContext"]


@dataclass(frozen=True)
class CompletionResult:
    """Candidates replacing the text between `start` and `end`."""

    start: int
    end: int
    candidates: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RequestContext:
    """Values derived for a single completion request."""

    line: str
    split: WordSplit
    style: Style
    trigger: str

    @property
    def protocol(self) -> StyleProtocol:
        """Completion protocol of the resolved style."""
        return STYLE_PROTOCOLS[self.style]


class NativeCompleter:  # pylint: disable=too-many-instance-attributes
    """Get completions from the shell behind `channel`."""

    def __init__(  # noqa: PLR0913
        self,
        channel: ShellChannel,
        prompt: str,
        contexts: Iterable[str] = DEFAULT_CONTEXTS,
        style_rules: Iterable[StyleRule] = (),
        exclude: str = DEFAULT_EXCLUDE,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        first_paragraph_only: bool = True,
        log: logging.Logger | None = None,
    ) -> None:
        self.channel = channel
        self.prompt = prompt
        self.contexts = frozenset(contexts)
        self.style_rules = tuple(style_rules)
        self.exclude = re.compile(exclude)
        self.first_paragraph_only = first_paragraph_only
        self.log = log or get_logger("completer")
        self.dispatcher = CaptureDispatcher(channel, timeout=timeout, poll_interval=poll_interval, log=self.log)

    @classmethod
    def from_config(cls, channel: ShellChannel, config: Configuration) -> NativeCompleter:
        """Build a completer from the ``[native_complete]`` section.

        Raises:
            ConfigError: if the section doesn't validate
        """
        errors = ConfigValidator(config, "native_complete", config.log).validate(CONFIG_SCHEMA)
        if errors:
            for error in errors:
                config.log.error(error)
            raise ConfigError("\n".join(errors))
        rules = [StyleRule(rule["pattern"], Style(rule["style"])) for rule in config.get_list("style_rules")]
        return cls(
            channel,
            prompt=config.get_str("prompt"),
            contexts=config.get_list("contexts"),
            style_rules=rules,
            exclude=config.get_str("exclude"),
            timeout=config.get_float("timeout"),
            poll_interval=config.get_float("poll_interval"),
            first_paragraph_only=config.get_bool("first_paragraph_only", True),
            log=config.log,
        )

    @property
    def capturing(self) -> bool:
        """Tell if a request is waiting for the shell."""
        return self.dispatcher.capturing

    def attach(self, shell: PtyShell) -> None:
        """Make `shell` abort our capture before any other input is submitted."""
        shell.add_pre_submit_hook(self.abort)

    async def abort(self) -> bool:
        """Cancel the request in progress, if any, and wait for its cleanup."""
        return await self.dispatcher.abort()

    def prepare(self, text: str, line_start: int, cursor: int) -> RequestContext:
        """Derive the request values from the host's text.

        Args:
            text: host buffer, containing the prompt followed by the line
            line_start: offset where the shell's prompt ends
            cursor: offset of the cursor

        Raises:
            PromptNotRecognizedError: if the prompt doesn't precede `line_start`
        """
        prompt_text = text[:line_start]
        check_prompt(prompt_text, self.prompt)
        line = text[line_start:cursor]
        style = resolve_style(prompt_text, self.style_rules, self.channel.program)
        return RequestContext(line=line, split=split_line(line), style=style, trigger=build_trigger(line, style))

    def candidates(self, raw: str, request: RequestContext) -> list[str]:
        """Extract the candidates from a raw capture."""
        tokens = normalize_output(
            raw,
            request.line,
            request.split.prefix,
            request.protocol,
            first_paragraph_only=self.first_paragraph_only,
            prompt=self.prompt,
        )
        return filter_candidates(tokens, request.split.common, request.split.prefix, self.exclude)

    async def complete(
        self,
        text: str,
        line_start: int,
        cursor: int,
        context: str = "shell",
        cancel: asyncio.Event | None = None,
    ) -> CompletionResult | None:
        """Ask the shell for the completions of the line before `cursor`.

        Args:
            text: host buffer, containing the prompt followed by the line
            line_start: offset where the shell's prompt ends
            cursor: offset of the cursor
            context: identifier of the host context asking for completions
            cancel: set it to abandon the request

        Returns:
            None when completion doesn't apply here, else the result
            (with no candidates if the shell didn't answer in time)

        Raises:
            PromptNotRecognizedError: if the prompt doesn't precede `line_start`
        """
        if context not in self.contexts:
            self.log.debug("completion disabled in context %r", context)
            return None
        if self.capturing or self.channel.capturing:
            self.log.debug("capture already in progress, request rejected")
            return None

        request = self.prepare(text, line_start, cursor)
        self.log.debug("completing %r as %s (common=%r, prefix=%r)", request.line, request.style, request.split.common, request.split.prefix)

        try:
            raw = await self.dispatcher.dispatch(request.trigger, self.prompt, request.protocol.discard, cancel)
        except CaptureBusyError:
            self.log.debug("capture already in progress, request rejected")
            return None

        start = cursor - len(request.split.prefix)
        if raw is None:
            return CompletionResult(cursor, cursor, [])
        result = CompletionResult(start, cursor, self.candidates(raw, request))
        self.log.debug("%d candidate(s): %s", len(result.candidates), result.candidates)
        return result
