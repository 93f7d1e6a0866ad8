"""Logging configuration for the player."""

from __future__ import annotations

import logging

from .config import AppConfig

LOGGER_NAME = "audio_wave"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
FILE_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | "
    "%(module)s:%(lineno)d | %(funcName)s | %(message)s"
)


def _reset(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: AppConfig, *, console: bool = True) -> logging.Logger:
    """Route the player log to a file and, unless embedded, to the console.

    ``console=False`` suits hosts that own stderr. Records carry the thread
    name since loads and backend events start off the UI thread.
    """
    logger = logging.getLogger(LOGGER_NAME)
    _reset(logger, logging.DEBUG)

    file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
    file_handler.setLevel(config.file_log_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(config.log_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    logging.captureWarnings(True)
    warnings_logger = logging.getLogger("py.warnings")
    _reset(warnings_logger, logging.DEBUG)
    warnings_logger.addHandler(file_handler)
    return logger
