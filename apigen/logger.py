"""
Logging configuration for apigen.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "apigen",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # setup_logger runs once at import time and again from the CLI; later calls
    # only adjust the level and add a file handler if one was requested.
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            logger.addHandler(_file_handler(log_file, level))
        return logger

    # Format: timestamp - module - level - message
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_formatter())
    logger.addHandler(console_handler)

    if log_file:
        logger.addHandler(_file_handler(log_file, level))

    return logger


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def _file_handler(log_file: str, level: int) -> logging.FileHandler:
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(_formatter())
    return file_handler


# Package logger, configured on import
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "apigen.extractor") inherit the package logger's
    handlers and level, and their name shows which stage produced a message.

    Args:
        module_name: Name of the module (e.g., 'sanitizer', 'extractor')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"apigen.{module_name}")
