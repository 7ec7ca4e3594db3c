"""
Logging setup for the "lacr" logger tree.

Every module logs through logging.getLogger("lacr.<area>"); this module
attaches a single stdout handler to the "lacr" parent so all of them share
one format.
"""

import logging
import sys

from lacr.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the "lacr" logger once and return it.

    Calling it again only updates the level, so importing the app in tests
    or reloading under uvicorn never stacks duplicate handlers.
    """
    logger = logging.getLogger("lacr")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
