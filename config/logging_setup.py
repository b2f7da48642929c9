"""Root logger configuration shared by the UI and command-line entry points."""

from __future__ import annotations

import logging

from .settings import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """
    Configure the root logger once and return the package logger.

    Args:
        level: Logging level (name or number). Defaults to LOG_LEVEL.

    Returns:
        The "compliance" logger
    """
    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    else:
        root.setLevel(resolved)

    # pdfplumber's parser is very chatty at DEBUG
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

    return logging.getLogger("compliance")
