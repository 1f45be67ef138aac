"""Schema of the ``[native_complete]`` configuration section."""

from .constants import DEFAULT_CONTEXTS, DEFAULT_EXCLUDE, DEFAULT_POLL_INTERVAL, DEFAULT_PROMPT, DEFAULT_TERM, DEFAULT_TIMEOUT
from .styles import Style
from .validation import ConfigField, ConfigItems, validate_regex

__all__ = ["CONFIG_SCHEMA", "STYLE_RULE_SCHEMA"]

STYLE_RULE_SCHEMA = ConfigItems(
    ConfigField("pattern", str, required=True, description="Regex matching the end of the prompt", validator=validate_regex),
    ConfigField("style", str, required=True, description="Completion style to use", choices=[str(s) for s in Style]),
)

CONFIG_SCHEMA = ConfigItems(
    ConfigField("contexts", list, default=list(DEFAULT_CONTEXTS), description="Contexts where completion is enabled"),
    ConfigField("exclude", str, default=DEFAULT_EXCLUDE, description="Characters a candidate can't contain", validator=validate_regex),
    ConfigField("prompt", str, default=DEFAULT_PROMPT, description="Regex matching the end of the shell prompt", validator=validate_regex),
    ConfigField("style_rules", list, default=[], description="Ordered prompt pattern -> style rules", items=STYLE_RULE_SCHEMA),
    ConfigField("timeout", (float, int), default=DEFAULT_TIMEOUT, description="Seconds to wait for the shell's answer"),
    ConfigField("poll_interval", (float, int), default=DEFAULT_POLL_INTERVAL, description="Seconds between cancellation checks"),
    ConfigField("idle_timeout", (float, int), default=0.5, description="Seconds of silence ending a capture"),
    ConfigField("first_paragraph_only", bool, default=True, description="Ignore the output after the first blank line"),
    ConfigField("shell", str, description="Shell started by the natcomp command (defaults to $SHELL)"),
    ConfigField("term", str, default=DEFAULT_TERM, description="TERM value given to the shell"),
)
