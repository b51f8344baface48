"""
Logging configuration for the favorite picker.

Sets up loguru sinks for the CLI; library code only binds named loggers.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]}:{function}:{line} - {message}"


def setup_logging(
    level: str = "INFO",
    debug: bool = False,
    log_dir: Path | None = None,
) -> None:
    """
    Configure loguru logging.

    Args:
        level: Log level for the console sink (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, log DEBUG to the console and add a debug log file
        log_dir: Directory for log files; None disables file logging
    """
    logger.remove()
    logger.configure(extra={"component": "favorite_picker"})

    console_level = "DEBUG" if debug else level
    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT)

    if log_dir is None:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Session events (INFO and above) survive between runs
    logger.add(
        log_dir / "favorite_picker.log",
        level="INFO",
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )

    if debug:
        logger.add(
            log_dir / "favorite_picker_debug.log",
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="50 MB",
            retention="3 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger bound to a component name.

    Args:
        name: Component name shown in log lines (defaults to the package name)

    Returns:
        Logger instance
    """
    return logger.bind(component=name or "favorite_picker")
