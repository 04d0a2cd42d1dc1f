"""
Infrastructure module - settings and logging.
"""

from .config import Settings
from .logging_config import LOGGER_NAME, setup_logging

__all__ = [
    # config
    "Settings",
    # logging
    "LOGGER_NAME",
    "setup_logging",
]
