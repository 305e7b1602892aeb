"""Logging setup for applications built on imagespace.

The library itself only creates module loggers under the ``imagespace``
namespace; call :func:`setup_logging` from a script to see them.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = None) -> None:
    """Configure the ``imagespace`` namespace logger.

    Any handlers left by a previous call are removed first, so calling
    this again changes the level without duplicating output.

    Args:
        level: Logging level (e.g. ``logging.DEBUG``, ``logging.INFO``).
        log_file: Optional path to also write logs to.
    """
    logger = logging.getLogger("imagespace")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")
