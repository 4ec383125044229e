"""Logging configuration for the window-bridge CLI.

--debug wins over --verbose, which wins over the configured `log_level`.
Level names are colored when stderr is a terminal.
"""

import logging
import sys
from typing import Union

LOGGER_NAME = "window_bridge"

QUIET_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI colors."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        plain = record.levelname
        color = self.COLORS.get(plain)
        if color is None:
            return super().format(record)

        # Records are shared between handlers
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def resolve_level(verbose: bool, debug: bool, default_level: Union[int, str]) -> int:
    """Pick the effective level from CLI flags and the configured default."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if isinstance(default_level, str):
        return logging.getLevelName(default_level.upper())
    return default_level


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    default_level: Union[int, str] = logging.WARNING,
) -> logging.Logger:
    """Attach a single stderr handler to the window_bridge logger.

    Calling it again replaces the previous handler.

    Returns:
        The package logger
    """
    level = resolve_level(verbose, debug, default_level)
    if level <= logging.DEBUG:
        log_format = DEBUG_FORMAT
    elif level <= logging.INFO:
        log_format = VERBOSE_FORMAT
    else:
        log_format = QUIET_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter_cls = ColoredFormatter if sys.stderr.isatty() else logging.Formatter
    handler.setFormatter(formatter_cls(log_format))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
