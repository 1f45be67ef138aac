"""Configuration validation framework with schema definitions.

Provides declarative schema definitions (ConfigField, ConfigItems) for
validating the configuration. Supports type checking, required fields,
choices, validation of lists of tables, and fuzzy matching for typo detection.

Used by:
- NativeCompleter.from_config() for runtime validation
- 'natcomp validate' CLI for static configuration checking
"""

import difflib
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

from .config import BOOL_STRINGS

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
    "validate_regex",
]


@dataclass
class ConfigField:
    """Describes an expected configuration field for validation.

    Attributes:
        name: The configuration key name
        field_type: Expected type (str, int, float, bool, list, dict) or tuple of types for union
        required: Whether the field is required
        default: Default value if not provided
        description: Human-readable description for error messages
        choices: List of valid values for enum-like fields
        validator: Custom validator function returning list of error messages
        items: Schema of each table when field_type is a list of tables
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    default: Any = None
    description: str = ""
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None
    items: "ConfigItems | None" = None

    @property
    def type_name(self) -> str:
        """Return human-readable type name (e.g., 'str', 'float or int')."""
        if isinstance(self.field_type, tuple):
            return " or ".join(typ.__name__ for typ in self.field_type)
        return self.field_type.__name__


class ConfigItems(list):
    """A list of ConfigField items with cached lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)
        self._cache: dict[str, ConfigField] = {}

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name, with caching for repeated lookups."""
        v = self._cache.get(name)
        if not v:
            for prop in self:
                if prop.name == name:
                    v = prop
                    self._cache[name] = v
                    break
        return v


def validate_regex(value: Any) -> list[str]:  # noqa: ANN401
    """Check that `value` compiles as a regular expression."""
    try:
        re.compile(value)
    except re.error as e:
        return [f"Invalid regular expression {value!r}: {e}"]
    return []


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    """Find a similar key using fuzzy matching.

    Returns:
        The closest matching key, or None if no close match found
    """
    matches = difflib.get_close_matches(unknown_key, known_keys, n=1)
    if matches:
        return matches[0]
    return None


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        section: Config section name
        field: Field name that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error

    Returns:
        Formatted error message
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


class ConfigValidator:
    """Validates configuration against a schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        """Initialize the validator.

        Args:
            config: The configuration dictionary to validate
            section: Name of the section for error messages
            logger: Logger instance for warnings
        """
        self.config = config
        self.section = section
        self.log = logger

    def validate(self, schema: ConfigItems) -> list[str]:
        """Validate configuration against schema.

        Returns:
            List of error messages (empty if validation passed)
        """
        errors = []

        for field_def in schema:
            value = self.config.get(field_def.name)

            if field_def.required and value is None:
                errors.append(format_config_error(self.section, field_def.name, "Missing required field", f"Add '{field_def.name}' to [{self.section}]"))
                continue

            if value is None:
                continue

            type_error = self._check_type(field_def, value)
            if type_error:
                errors.append(type_error)
                continue

            if field_def.choices is not None and value not in field_def.choices:
                choices_str = ", ".join(repr(c) for c in field_def.choices)
                errors.append(
                    format_config_error(
                        self.section,
                        field_def.name,
                        f"Invalid value {value!r}",
                        f"Valid options: {choices_str}",
                    )
                )
            if field_def.validator:
                errors.extend(format_config_error(self.section, field_def.name, validation_error) for validation_error in field_def.validator(value))

        return errors

    def _check_type(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Check if value matches expected type.

        Returns:
            Error message if type mismatch, None otherwise
        """
        expected_type = field_def.field_type

        if isinstance(expected_type, tuple):
            for single_type in expected_type:
                if self._check_type(ConfigField(field_def.name, single_type), value) is None:
                    return None
            return format_config_error(self.section, field_def.name, f"Expected {field_def.type_name}, got {type(value).__name__}")

        checkers = {
            bool: self._check_bool,
            int: self._check_numeric,
            float: self._check_numeric,
            str: self._check_str,
            list: self._check_list,
        }

        checker = checkers.get(expected_type)
        if checker:
            return checker(field_def, value)
        return None

    def _check_bool(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Check bool type (special handling since bool is subclass of int)."""
        if isinstance(value, bool):
            return None
        if isinstance(value, str) and value.lower() in BOOL_STRINGS:
            return None
        return format_config_error(
            self.section,
            field_def.name,
            f"Expected bool, got {type(value).__name__}",
            "Use true/false (without quotes)",
        )

    def _check_numeric(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Check int/float type."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return None
        expected_type = cast("type[int | float]", field_def.field_type)
        try:
            expected_type(value)
        except (ValueError, TypeError):
            return format_config_error(
                self.section,
                field_def.name,
                f"Expected {expected_type.__name__}, got {type(value).__name__}",
                f"Use {field_def.name} = 1.5 (without quotes)",
            )
        return None

    def _check_str(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Check str type."""
        if isinstance(value, str):
            return None
        return format_config_error(
            self.section,
            field_def.name,
            f"Expected str, got {type(value).__name__}",
            f'Use {field_def.name} = "value"',
        )

    def _check_list(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Check list type and optionally validate each table."""
        if not isinstance(value, list):
            return format_config_error(
                self.section,
                field_def.name,
                f"Expected list, got {type(value).__name__}",
                f'Use {field_def.name} = ["item1", "item2"]',
            )
        if field_def.items is None:
            return None

        errors: list[str] = []
        for index, item in enumerate(value):
            item_section = f"{self.section}.{field_def.name}[{index}]"
            if not isinstance(item, dict):
                errors.append(format_config_error(item_section, field_def.name, f"Expected table, got {type(item).__name__}"))
                continue
            item_validator = ConfigValidator(item, item_section, self.log)
            errors.extend(item_validator.validate(field_def.items))
            errors.extend(item_validator.warn_unknown_keys(field_def.items))
        return "\n".join(errors) or None

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log warnings for unknown configuration keys.

        Returns:
            List of warning messages
        """
        warnings = []
        known_keys = {f.name for f in schema}

        for key in self.config:
            if key in known_keys:
                continue

            similar = _find_similar_key(key, list(known_keys))
            if similar:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{similar}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"

            self.log.warning(msg)
            warnings.append(msg)

        return warnings
