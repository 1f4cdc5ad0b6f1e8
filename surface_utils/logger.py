"""
Application logger for the Interior Surface Visualizer.

Every module logs through the `surface_visualizer` logger. Streamlit re-runs
the script on each interaction, so configuration must be safe to repeat.
"""

import logging
import sys
import time
from functools import wraps

from app_config.constants import LoggingConfig

logger = logging.getLogger(LoggingConfig.LOGGER_NAME)


def setup_logging(level=LoggingConfig.DEFAULT_LEVEL):
    """
    Attach a single stdout handler to the application logger.

    Args:
        level: Level name ('DEBUG', 'INFO', ...) or numeric logging level

    Returns:
        logging.Logger: The configured application logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_surface_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler._surface_handler = True
    handler.setFormatter(logging.Formatter(LoggingConfig.FORMAT, datefmt=LoggingConfig.DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def log_exceptions(func):
    """Log any exception escaping `func` with its traceback, then re-raise it."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Exception in {func.__name__}: {e}", exc_info=True)
            raise
    return wrapper


def log_performance(func):
    """
    Log how long `func` took.

    Calls slower than LoggingConfig.SLOW_OPERATION_SECONDS are logged as warnings.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed after {time.perf_counter() - start:.3f}s: {e}")
            raise

        elapsed = time.perf_counter() - start
        level = logging.WARNING if elapsed > LoggingConfig.SLOW_OPERATION_SECONDS else logging.INFO
        logger.log(level, f"{func.__name__} completed in {elapsed:.3f}s")
        return result
    return wrapper


setup_logging()
