import logging
import sys

from pythonjsonlogger import jsonlogger

from watchcache.config import get_settings

settings = get_settings()


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a logger with JSON formatting for structured logging.

    Every record carries the service name and version so the refresh loop
    and request logs can be told apart from other processes on the host.

    Args:
        name: The name of the logger (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.log_level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        static_fields={"service": settings.app_name, "version": settings.app_version},
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    return logger
