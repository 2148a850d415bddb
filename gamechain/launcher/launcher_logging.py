"""
Launcher logging configuration helpers.

This module owns runtime logging setup for the launcher process, including
version-tagged formatting, optional file handler wiring and the
`GAMECHAIN_DEBUG` escape hatch.
"""

from __future__ import annotations

import logging
import os

from gamechain import __version__
from gamechain.common.settings import settings

__all__ = [
    "logging_setup",
    "logFormatWithVersion_get",
    "debugEnv_isEnabled",
]


def logging_setup(level: str, log_format: str, log_file: str | None) -> None:
    """
    Configure logging handlers and version-tagged format string.

    Args:
        level:
            Effective log level token (for example `INFO` or `DEBUG`).
            `GAMECHAIN_DEBUG=1` forces `DEBUG`.
        log_format:
            Base formatter string.
        log_file:
            Optional log file path.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    if debugEnv_isEnabled():
        level = "DEBUG"

    enhanced_format: str = logFormatWithVersion_get(log_format)
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=enhanced_format,
        handlers=handlers,
    )


def logFormatWithVersion_get(log_format: str) -> str:
    """
    Inject runtime version tag into timestamped log format.

    Args:
        log_format:
            Base formatter string.

    Returns:
        Formatter string with embedded version token.
    """
    return log_format.replace("%(asctime)s", f"%(asctime)s [v{__version__}]")


def debugEnv_isEnabled() -> bool:
    """
    Check the debug environment variable.

    Returns:
        True when `GAMECHAIN_DEBUG` is `1`.
    """
    return os.environ.get(settings.DEBUG_ENV) == "1"
