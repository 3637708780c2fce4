"""Settings mapping with schema-provided defaults."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["Configuration"]

ConfigValueType = int | str


class Configuration(dict):
    """Settings mapping falling back to schema defaults."""

    def __init__(
        self,
        *args: Any,  # noqa: ANN401
        logger: logging.Logger,
        schema: ConfigItems | None = None,
        **kwargs: Any,  # noqa: ANN401
    ):
        """Initialize the configuration object.

        Args:
            *args: Arguments for dict
            logger: Logger instance to use for warnings
            schema: Optional list of ConfigField definitions for automatic defaults
            **kwargs: Keyword arguments for dict
        """
        super().__init__(*args, **kwargs)
        self.log = logger
        self._schema_defaults: dict[str, ConfigValueType] = {}
        if schema:
            self._schema_defaults = {field.name: field.default for field in schema if field.default is not None}

    def get(self, name: str, default: ConfigValueType | None = None) -> ConfigValueType | None:  # type: ignore[override]
        """Return the value, else the schema default, else `default`."""
        if name in self:
            return dict.get(self, name)  # type: ignore[return-value]
        return self._schema_defaults.get(name, default)

    def get_int(self, name: str, default: int = 0) -> int:
        """Get an integer value, `default` if missing or invalid."""
        value = self.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except (ValueError, TypeError):
            self.log.warning("Invalid integer value for %s: %s", name, value)
            return default
