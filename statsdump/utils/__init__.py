# Utils module
"""
Shared utilities for logging and settings.
"""

from .config import load_settings
from .logger import get_logger, setup_logging

__all__ = [
    "load_settings",
    "get_logger",
    "setup_logging",
]
