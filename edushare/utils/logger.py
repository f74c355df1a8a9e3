"""Logging for the EduShare service.

Everything logs under the ``edushare`` logger. Repositories use the app
logger directly; runtime services take a named child through ``get_logger``
so their records carry the module they came from.
"""

import logging
from pathlib import Path
from typing import List, Optional


APP_LOGGER_NAME = "edushare"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(log_level: str) -> int:
    return getattr(logging, log_level.upper(), logging.INFO)


def _handlers(level: int, log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional file handler.

    Handlers are attached once; later calls only adjust the level.

    Args:
        name: Logger name
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown means INFO)
        log_file: Optional path of a log file, parent directories are created

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    level = _level(log_level)
    logger.setLevel(level)

    if not logger.handlers:
        for handler in _handlers(level, log_file):
            logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, e.g. ``get_logger("poller")`` -> ``edushare.poller``."""
    if name == APP_LOGGER_NAME or name.startswith(APP_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """Configure the ``edushare`` logger from ``log_level`` and ``log_file``."""
    global app_logger
    app_logger = setup_logger(APP_LOGGER_NAME, log_level=settings.log_level, log_file=settings.log_file)
    return app_logger


def get_app_logger() -> logging.Logger:
    """The application logger; console-only until ``init_app_logger`` runs."""
    return app_logger if app_logger is not None else setup_logger(APP_LOGGER_NAME)
