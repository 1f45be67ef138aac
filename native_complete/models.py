"""Shared error types and exit codes."""

from enum import IntEnum

__all__ = [
    "CaptureBusyError",
    "ConfigError",
    "ExitCode",
    "NativeCompleteError",
    "PromptNotRecognizedError",
]


class NativeCompleteError(Exception):
    """Base class for errors raised by native-complete."""


class PromptNotRecognizedError(NativeCompleteError):
    """The text before the completed line does not look like the shell prompt.

    Raised before anything is written to the shell.
    """

    def __init__(self, prompt_text: str, pattern: str) -> None:
        super().__init__(f"prompt not recognized: {prompt_text[-40:]!r} does not end with /{pattern}/")
        self.prompt_text = prompt_text
        self.pattern = pattern


class CaptureBusyError(NativeCompleteError):
    """A capture is already outstanding on this shell session."""


class ConfigError(NativeCompleteError):
    """Used for configuration errors which already triggered logging."""


class ExitCode(IntEnum):
    """Standard exit codes for the natcomp command."""

    SUCCESS = 0
    USAGE_ERROR = 1  # No line provided, invalid arguments
    ENV_ERROR = 2  # Broken or unreadable config, shell cannot be started
    COMMAND_ERROR = 4  # Completion failed
