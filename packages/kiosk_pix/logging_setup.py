"""Logging for ``kiosk_pix``.

Modules call ``get_logger("kiosk_pix.<module>")`` and stay silent until the
CLI calls :func:`configure_logging`, which routes the package logger to a
rich handler on stderr so log lines never mix with payloads on stdout.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

_PKG_LOGGER_NAME = "kiosk_pix"


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("KIOSK_LOG_LEVEL") or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Send package logs to stderr at ``level`` (default: ``KIOSK_LOG_LEVEL`` or INFO).

    Calling it again only updates the level.
    """

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    resolved = _parse_level(level)
    logger.setLevel(resolved)
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return

    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False))
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
