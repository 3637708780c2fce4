"""Debug switch.

Debug mode lowers the ``argsuggest`` logger to DEBUG and adds the component
name and source location to screen records. It starts on when
``ARGSUGGEST_DEBUG`` is set to anything but "", "0", "false" or "no".
"""

import os

__all__ = ["DEBUG_ENV", "is_debug", "set_debug"]

DEBUG_ENV = "ARGSUGGEST_DEBUG"

_flags = {"debug": os.environ.get(DEBUG_ENV, "").strip().lower() not in ("", "0", "false", "no")}


def is_debug() -> bool:
    """Tell whether debug mode is on."""
    return _flags["debug"]


def set_debug(value: bool) -> None:
    """Switch debug mode; applied by the next `init_logger` call."""
    _flags["debug"] = value
