"""Centralized logging configuration — stdlib only.

Library modules call get_logger(__name__) and never touch handlers.
Entry points (the CLI) call configure() once.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional


_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger under the hirefee hierarchy."""
    return logging.getLogger(name)


def configure(level: Optional[str] = None) -> None:
    """Attach a console handler to the package logger.

    Level comes from the argument, else LOG_LEVEL, else WARNING.
    Safe to call more than once; only the level is updated after the
    first call.
    """
    global _configured
    level_name = (level or os.environ.get("LOG_LEVEL", "WARNING")).upper()
    resolved = getattr(logging, level_name, logging.WARNING)
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    logger = logging.getLogger("hirefee")
    logger.setLevel(resolved)
    if _configured:
        return

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    logger.addHandler(console)
    _configured = True
