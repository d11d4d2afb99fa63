"""
Relay logging configuration helpers.

This module owns runtime logging setup for the relay process: version-tagged
formatting, optional file output, and the level floor implied by the relay's
verbose packet logging.
"""

from __future__ import annotations

import logging

from crowdptr import __version__

__all__ = [
    "logging_setup",
    "logFormatWithVersion_get",
    "logLevel_resolve",
]


def logging_setup(
    level: str, log_format: str, log_file: str | None, verbose: bool = False
) -> None:
    """
    Configure relay logging handlers and version-tagged format string.

    Args:
        level:
            Configured log level token (for example `INFO` or `DEBUG`).
        log_format:
            Base formatter string.
        log_file:
            Optional log file path.
        verbose:
            Relay logs every packet at INFO; the level is lowered to INFO
            so those records are not filtered.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logLevel_resolve(level, verbose),
        format=logFormatWithVersion_get(log_format),
        handlers=handlers,
    )
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.WARNING)


def logLevel_resolve(level: str, verbose: bool) -> int:
    """
    Resolve the numeric root log level.

    Args:
        level:
            Configured log level token.
        verbose:
            Whether per-packet relay logging is on.

    Returns:
        Numeric level, at most `logging.INFO` when verbose.

    Raises:
        ValueError:
            Raised for an unknown level token.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    if verbose:
        return min(numeric, logging.INFO)
    return numeric


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
