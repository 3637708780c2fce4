"""Logging for argsuggest.

Components log through children of the ``argsuggest`` logger
(``argsuggest.scheduler``, ``argsuggest.backends.script``...). Handlers and
level are set on that parent only, so `init_logger` also reconfigures the
loggers created at import time. Until it is called, records go wherever the
host application routes the ``argsuggest`` logger.
"""

import logging

from .ansi import LogStyles, make_style, should_colorize
from .debug import is_debug, set_debug

__all__ = [
    "ROOT_LOGGER",
    "ScreenLogFormatter",
    "get_logger",
    "init_logger",
]

ROOT_LOGGER = "argsuggest"

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s (%(filename)s:%(lineno)d)"
SCREEN_FORMAT = "%(message)s"
SCREEN_DEBUG_FORMAT = "%(name)s: %(message)s (%(filename)s:%(lineno)d)"

_LEVEL_STYLES = {
    logging.WARNING: LogStyles.WARNING,
    logging.ERROR: LogStyles.ERROR,
    logging.CRITICAL: LogStyles.CRITICAL,
}


class ScreenLogFormatter(logging.Formatter):
    """Terminal formatter, coloring warnings and errors."""

    def __init__(self, colorize: bool | None = None) -> None:
        """Initialize.

        Args:
            colorize: force colors on or off, auto-detected from stderr if None
        """
        super().__init__(SCREEN_DEBUG_FORMAT if is_debug() else SCREEN_FORMAT)
        self.colorize = should_colorize() if colorize is None else colorize

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        codes = _LEVEL_STYLES.get(record.levelno)
        if not (self.colorize and codes):
            return text
        prefix, suffix = make_style(*codes)
        return f"{prefix}{text}{suffix}"


def init_logger(filename: str | None = None, force_debug: bool = False) -> logging.Logger:
    """Send argsuggest records to stderr, and to `filename` if given.

    Calling it again replaces the handlers installed previously.

    Args:
        filename: Optional filename to log to
        force_debug: If True, turn debug mode on first

    Returns:
        The ``argsuggest`` logger
    """
    if force_debug:
        set_debug(True)

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)
    screen_handler = logging.StreamHandler()
    screen_handler.setFormatter(ScreenLogFormatter())
    root.addHandler(screen_handler)

    root.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    root.propagate = False
    return root


def get_logger(name: str = ROOT_LOGGER, level: int | None = None) -> logging.Logger:
    """Return the logger of one component.

    Args:
        name: component name, placed under ``argsuggest`` unless already there
        level: explicit level, inherited from ``argsuggest`` if not set
    """
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
