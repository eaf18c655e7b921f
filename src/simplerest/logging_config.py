"""Logging setup driven by ClientConfig."""

import logging
import sys
from typing import Optional, TextIO

from .models.config import ClientConfig

LOGGER_NAME = "simplerest"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _replace_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: ClientConfig, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the simplerest logger from a client configuration.

    Handlers installed by an earlier call are closed and replaced, so the
    CLI can call this once per command. Records go to stderr by default,
    keeping stdout free for response bodies.

    Args:
        config: Source of log_level and log_file
        stream: Console stream (defaults to sys.stderr)

    Returns:
        The configured "simplerest" logger
    """
    level = getattr(logging, config.log_level)
    formatter = logging.Formatter(LOG_FORMAT)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    _replace_handlers(logger)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Library records stay out of the root logger
    logger.propagate = False

    return logger
