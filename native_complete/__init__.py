"""native-complete - ask a running interactive shell for its own completions.

A crafted key sequence is written into the shell's terminal, the shell's raw
answer is captured, then cleaned up into a list of candidates along with the
span of text they replace. The shell's completion logic is never reimplemented.
"""

from .completer import CompletionResult, NativeCompleter
from .models import CaptureBusyError, NativeCompleteError, PromptNotRecognizedError
from .styles import Style, StyleRule

__all__ = [
    "CaptureBusyError",
    "CompletionResult",
    "NativeCompleteError",
    "NativeCompleter",
    "PromptNotRecognizedError",
    "Style",
    "StyleRule",
]
