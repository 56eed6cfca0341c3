"""Loguru sink configuration shared by the CLI, the worker and the API."""

from __future__ import annotations

import sys

from loguru import logger


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Replace the default loguru sink with the configured ones."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan> - <level>{message}</level>"
        ),
    )
    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation="10 MB",
            retention=5,
            enqueue=True,
        )
