"""
Logging helpers shared by the package.

Modules log through ``logging.getLogger(__name__)``; ``setup_logger`` attaches a
single stream handler to the package logger for scripts and examples.
"""

import logging
from typing import Union

PACKAGE_LOGGER_NAME = "trustline_tx"

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(PACKAGE_LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def setup_logger(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the package logger with a stream handler.

    Calling it again only updates the level; handlers are not duplicated.

    Args:
        level: Logging level name (``"DEBUG"``) or number.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    if not any(getattr(h, "_trustline_tx", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._trustline_tx = True
        logger.addHandler(handler)

    return logger
