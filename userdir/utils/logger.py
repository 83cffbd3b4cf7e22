"""
Logging setup using loguru.

Modules grab a bound logger with get_logger(__name__) and log events with
keyword context, e.g. logger.info("User created", login=login).
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..core.config import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> | "
    "<level>{message}</level> | {extra}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]} | {message} | {extra}"

logger.configure(extra={"module": "userdir"})


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Replace the default loguru sink with console (and optional file) sinks."""
    settings = settings or get_settings()

    logger.remove()
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=settings.log_level,
        colorize=True,
    )

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            format=FILE_FORMAT,
            level=settings.log_level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


def get_logger(name: str):
    return logger.bind(module=name)
