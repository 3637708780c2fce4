"""Settings schema definitions and validation.

`ConfigField` describes one setting (type, default, lower bound);
`ConfigItems` groups them; `ConfigValidator` reports problems as readable
messages, suggesting the closest known key for typos, and remembers which
values it rejected so the caller can fall back to the defaults.
"""

import difflib
import logging
from dataclasses import dataclass
from typing import Any

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]


@dataclass
class ConfigField:
    """Describes an expected setting.

    Attributes:
        name: The setting key
        field_type: Expected type
        default: Value used when the setting is missing or rejected
        description: Human-readable description
        minimum: Lower bound for numeric settings
    """

    name: str
    field_type: type = str
    default: Any = None
    description: str = ""
    minimum: float | None = None


class ConfigItems(list):
    """A list of ConfigField items with lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def get(self, name: str) -> ConfigField | None:
        """Return the field called `name`, if any."""
        for prop in self:
            if prop.name == name:
                return prop
        return None

    @property
    def names(self) -> list[str]:
        """Return the known keys."""
        return [prop.name for prop in self]


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a settings error message."""
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


class ConfigValidator:
    """Validates a settings section against a schema.

    After `validate`, `rejected` holds the known keys whose value failed a
    check. Unknown keys are reported but not rejected.
    """

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger
        self.rejected: set[str] = set()

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return the list of problems found (empty when valid)."""
        errors = []
        self.rejected.clear()
        for field_def in schema:
            value = self.config.get(field_def.name)
            if value is None:
                continue
            error = self._check_type(field_def, value) or self._check_minimum(field_def, value)
            if error:
                errors.append(error)
                self.rejected.add(field_def.name)

        for key in self.config:
            if schema.get(key) is None:
                similar = difflib.get_close_matches(key, schema.names, n=1)
                suggestion = f"did you mean '{similar[0]}'?" if similar else ""
                errors.append(format_config_error(self.section, key, "Unknown setting", suggestion))

        for error in errors:
            self.log.warning(error)
        return errors

    def _check_type(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        expected = field_def.field_type
        if isinstance(value, bool) and expected is not bool:
            # bool is an int subclass, don't let `true` pass as a number
            return format_config_error(self.section, field_def.name, f"Expected {expected.__name__}, got bool")
        if expected is int and isinstance(value, str):
            try:
                int(value)
            except ValueError:
                pass
            else:
                return None
        if not isinstance(value, expected):
            return format_config_error(
                self.section,
                field_def.name,
                f"Expected {expected.__name__}, got {type(value).__name__}",
            )
        return None

    def _check_minimum(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        if field_def.minimum is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if number < field_def.minimum:
            return format_config_error(self.section, field_def.name, f"Must be at least {field_def.minimum}, got {value!r}")
        return None
