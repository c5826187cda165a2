"""Logging configuration."""

import sys
from pathlib import Path

from loguru import logger

from settings import LOG_DIR


def setup_logging(level: str = "INFO", to_file: bool = False, log_dir: Path | None = None):
    """Configure stderr logging, plus a rotating file sink when `to_file` is set."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if to_file:
        target = log_dir or LOG_DIR
        target.mkdir(parents=True, exist_ok=True)
        logger.add(
            target / "viewer_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="gz",
        )
        logger.info("Logging to {}", target)

    return logger
