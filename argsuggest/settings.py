"""Settings file loading.

Settings live in the ``[argsuggest]`` table of a TOML file. A missing file
is not an error: every setting has a default.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import Configuration
from .constants import DEFAULT_DEBOUNCE_MS, DEFAULT_SCRIPT_TIMEOUT_MS, SETTINGS_FILE, SETTINGS_SECTION
from .logging_setup import get_logger
from .models import SettingsError
from .validation import ConfigField, ConfigItems, ConfigValidator

if TYPE_CHECKING:
    import logging

__all__ = ["SETTINGS_SCHEMA", "load_settings", "make_settings"]

SETTINGS_SCHEMA = ConfigItems(
    ConfigField(
        "script_timeout",
        int,
        default=DEFAULT_SCRIPT_TIMEOUT_MS,
        description="Milliseconds before a script generator is abandoned",
        minimum=1,
    ),
    ConfigField(
        "debounce_delay",
        int,
        default=DEFAULT_DEBOUNCE_MS,
        description="Milliseconds to wait for debounced arguments without an explicit delay",
        minimum=1,
    ),
)


def make_settings(values: dict[str, Any] | None = None, logger: logging.Logger | None = None) -> Configuration:
    """Build a settings object from `values`, with schema defaults.

    Values failing validation are logged and replaced by their default.
    """
    log = logger or get_logger("settings")
    values = values or {}
    validator = ConfigValidator(values, SETTINGS_SECTION, log)
    validator.validate(SETTINGS_SCHEMA)
    accepted = {key: value for key, value in values.items() if key not in validator.rejected}
    return Configuration(accepted, logger=log, schema=SETTINGS_SCHEMA)


def load_settings(filename: str | Path | None = None, logger: logging.Logger | None = None) -> Configuration:
    """Load the settings file.

    Args:
        filename: settings file, defaults to $XDG_CONFIG_HOME/argsuggest/config.toml
        logger: logger for validation warnings

    Raises:
        SettingsError: the file exists but can't be parsed
    """
    log = logger or get_logger("settings")
    fname = Path(os.path.expandvars(str(filename))).expanduser() if filename else SETTINGS_FILE
    if not fname.exists():
        log.debug("No settings file at %s, using defaults", fname)
        return make_settings(logger=log)

    log.info("Loading %s", fname)
    with fname.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            log.critical("Problem reading %s: %s", fname, e)
            raise SettingsError(f"Invalid settings file {fname}") from e

    section = data.get(SETTINGS_SECTION, {})
    if not isinstance(section, dict):
        msg = f"[{SETTINGS_SECTION}] must be a table in {fname}"
        raise SettingsError(msg)
    return make_settings(section, logger=log)
