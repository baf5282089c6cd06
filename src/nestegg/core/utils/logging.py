"""
Logging for the nestegg CLI and library, via loguru.

Library modules log through ``loguru.logger`` directly and stay quiet until an
application calls setup_logging(). Engine fallbacks (missing prices, dropped
settings) are logged at DEBUG, so ``--verbose`` explains how a series was built.
"""

import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <7}</level> {message}"
# Module and function help trace which valuation fallback produced a number
DEBUG_CONSOLE_FORMAT = "<level>{level: <7}</level> <cyan>{name}:{function}</cyan> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "5 MB",
    retention: int = 3,
) -> None:
    """
    Replace loguru's default sink with nestegg's console and optional file sinks.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to a log file. If None, only logs to stderr.
        rotation: Size at which the log file is rotated.
        retention: Number of rotated files to keep.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=DEBUG_CONSOLE_FORMAT if level == "DEBUG" else CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)
