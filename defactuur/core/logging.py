"""Logging configuration for the client library."""

import logging
import sys
from typing import Optional

from defactuur.core.config import settings

HANDLER_NAME = "defactuur.console"


def setup_logging(debug: Optional[bool] = None) -> None:
    """Configure logging for applications embedding the client.

    Args:
        debug: Force debug level on or off. Defaults to ``settings.debug``.
    """
    if debug is None:
        debug = settings.debug
    log_level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Replace a handler from an earlier call, leave the host application's alone
    for handler in root_logger.handlers[:]:
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(HANDLER_NAME)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from the transport
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("defactuur").setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under ``defactuur``.

    Usage:
        logger = get_logger("scripts.smoke")
        logger.info("Fetching invoices")
    """
    if name == "defactuur" or name.startswith("defactuur."):
        return logging.getLogger(name)
    return logging.getLogger(f"defactuur.{name}")
