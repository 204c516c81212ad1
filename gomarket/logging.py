"""
Logging setup for the cart.

    from gomarket.logging import get_logger
    logger = get_logger(__name__)

The root logger gets one stdout handler on first import. LOG_LEVEL picks the
level; LOG_FORMAT=simple drops timestamps for collectors that add their own.
"""

import logging
import os
import sys
from functools import cache

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

# Upstash talks REST through httpx, which logs every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def _setup() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    fmt = SIMPLE_FORMAT if os.environ.get("LOG_FORMAT", "").lower() == "simple" else DETAILED_FORMAT

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_setup()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | None, max_length: int = 32) -> str:
    """
    Product ids come from the catalog unchecked: escape control characters
    so they cannot forge log lines, and cap the length.
    """
    if not id_value:
        return "N/A"
    safe = (
        str(id_value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    if len(safe) > max_length:
        return safe[:max_length] + "..."
    return safe
