"""Logging setup for command-line use of the engine."""

import logging
import sys


def setup_logging(level: int = logging.INFO, log_file: str = None) -> logging.Logger:
    """Configure the ``floraison`` logger.

    Library modules only call ``logging.getLogger(__name__)``; handlers are
    attached here, by the entry point.

    Args:
        level: Logging level for the package logger
        log_file: Optional path of a file that receives the same records

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("floraison")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
