"""Logging configuration for auto-versioner.

Centralized loguru setup. Two verbosity levels are supported: "terse"
(INFO and above) and "verbose" (adds DEBUG, e.g. catalog statistics and
every remote operation). Logs go to stderr; stdout carries command results.
"""

from __future__ import annotations

import sys

from loguru import logger

from .errors import ConfigError

LEVEL_TERSE = "terse"
LEVEL_VERBOSE = "verbose"

_LEVELS = {LEVEL_TERSE: "INFO", "": "INFO", LEVEL_VERBOSE: "DEBUG"}


def _escape(text: str) -> str:
    # Bound values are user data: keep them out of format fields and color markup.
    return text.replace("{", "{{").replace("}", "}}").replace("<", "\\<")


def _format(record) -> str:
    fields = " ".join(f"{key}={value}" for key, value in record["extra"].items())
    suffix = "  <dim>" + _escape(fields) + "</dim>" if fields else ""
    return (
        "<green>{time:YYYY-MM-DDTHH:mm:ss.SSSZ}</green> <level>{level: <7}</level> "
        "<level>{message}</level>" + suffix + "\n{exception}"
    )


def setup_logging(level: str = LEVEL_TERSE) -> None:
    """Configure the global loguru logger.

    Args:
        level: "terse" (default) or "verbose".

    Raises:
        ConfigError: For any other level name.
    """
    key = (level or "").strip().lower()
    if key not in _LEVELS:
        raise ConfigError(f"unknown log level {level!r}")

    logger.remove()
    logger.add(sys.stderr, level=_LEVELS[key], format=_format, colorize=None)
