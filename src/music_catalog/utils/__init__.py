"""Utility helpers."""

from .logging_config import (
    configure_third_party_loggers,
    get_logger,
    set_log_level,
    setup_logging,
)

__all__ = [
    "configure_third_party_loggers",
    "get_logger",
    "set_log_level",
    "setup_logging",
]
