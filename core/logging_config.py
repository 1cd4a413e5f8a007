# core/logging_config.py

"""
One "bms" logger for the whole service.

Level comes from LOG_LEVEL (default INFO). The scheduler and the Mongo
driver are chatty at INFO, so they are held at WARNING unless LOG_LEVEL is
DEBUG.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "bms"

NOISY_LOGGERS = ("apscheduler", "pymongo")


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # uvicorn --reload imports us twice
    if logger.handlers:
        return logger

    level = _level_from_env()
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
