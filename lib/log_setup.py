"""Logging setup shared by the bot and its tools."""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s"


def setup_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Configure the root logger and return the bot logger.

    Args:
        level: Level number or name such as "INFO"
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return logging.getLogger("steckbrief_bot")
