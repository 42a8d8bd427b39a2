# src/chainforensics/utils/logger.py
import logging
from typing import Optional, Union

from ..exceptions import ConfigurationError
from .config import Config

LOG_LEVELS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
}

def resolve_level(level: Union[str, int]) -> int:
    """Map a level name such as 'info' to its logging constant"""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigurationError(
            f"Unknown log level {level!r}, expected one of: {', '.join(LOG_LEVELS)}"
        )
    return LOG_LEVELS[level.upper()]

def get_logger(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Logger with a console handler, defaulting to Config.LOG_LEVEL"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(levelname)s - %(name)s - %(message)s'))
        logger.addHandler(handler)

    if level is not None:
        logger.setLevel(resolve_level(level))
    elif not logger.level:
        logger.setLevel(resolve_level(Config.LOG_LEVEL))

    return logger
