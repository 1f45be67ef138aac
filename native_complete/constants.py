"""Shared constants for native-complete."""

import os
from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "CONFIG_SECTION",
    "DEFAULT_CONTEXTS",
    "DEFAULT_EXCLUDE",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_PROMPT",
    "DEFAULT_TERM",
    "DEFAULT_TIMEOUT",
    "DISCARD_LINE",
    "SHELL_FAMILIES",
]

# Config file path - use XDG_CONFIG_HOME with fallback to ~/.config
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "native-complete" / "config.toml"

CONFIG_SECTION = "native_complete"

# Shell families recognized from the program name, checked in this order
SHELL_FAMILIES = ("bash", "zsh", "csh")

DEFAULT_CONTEXTS = ("shell",)

# Anything but alphanumerics and the punctuation found in paths & variables
DEFAULT_EXCLUDE = r"[^\w\-~/*.+$]"

DEFAULT_PROMPT = r"[$#%>] "

DEFAULT_TERM = "xterm-256color"

# Capture timings (seconds)
DEFAULT_TIMEOUT = 3.0
DEFAULT_POLL_INTERVAL = 0.1

# kill-whole-line in emacs keymaps
DISCARD_LINE = "\x15"
