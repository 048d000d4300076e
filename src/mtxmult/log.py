"""Logging setup for the command-line harness."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(threadName)s %(name)s: %(message)s"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(log_level_str: str = "WARNING") -> None:
    """
    Configure the package logger with a timestamped stream handler.

    Library modules only create loggers via logging.getLogger(__name__);
    handlers are attached here, by the entry point.

    Args:
        log_level_str: One of LOG_LEVELS (case-insensitive)
    """
    level = getattr(logging, log_level_str.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"invalid log level: {log_level_str}")

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("mtxmult")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
