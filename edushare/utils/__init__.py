"""Utilities package."""

from .logger import get_app_logger, get_logger, setup_logger, init_app_logger
from .timeutil import utcnow, as_utc, parse_timestamp

__all__ = [
    "get_app_logger",
    "get_logger",
    "setup_logger",
    "init_app_logger",
    "utcnow",
    "as_utc",
    "parse_timestamp",
]
