"""Core client modules."""

from defactuur.core.config import Settings, settings
from defactuur.core.logging import get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
]
