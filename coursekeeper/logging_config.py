"""
Logging setup for the CourseKeeper platform.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_ROOT_LOGGER = "coursekeeper"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the package logger once and return it."""
    level_name = (level or os.getenv("COURSEKEEPER_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(resolved)

    # Avoid duplicate console handlers
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(resolved)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger under the package namespace."""
    base = logging.getLogger(_ROOT_LOGGER)
    if not name or name == _ROOT_LOGGER:
        return base
    if name.startswith(_ROOT_LOGGER + "."):
        name = name[len(_ROOT_LOGGER) + 1:]
    return base.getChild(name)
