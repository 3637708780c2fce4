"""Shared constants for argsuggest."""

import os
from pathlib import Path

__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_SCRIPT_TIMEOUT_MS",
    "GRACEFUL_KILL_TIMEOUT",
    "SETTINGS_FILE",
    "SETTINGS_SECTION",
]

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
SETTINGS_FILE = _xdg_config_home / "argsuggest" / "config.toml"
SETTINGS_SECTION = "argsuggest"

# Script generators are abandoned after this many milliseconds
DEFAULT_SCRIPT_TIMEOUT_MS = 5000

# Used when an argument asks for debouncing without a positive delay
DEFAULT_DEBOUNCE_MS = 200

# Seconds between SIGTERM and SIGKILL for timed out scripts
GRACEFUL_KILL_TIMEOUT = 0.5
