"""
yttxt.logging - Centralized logging configuration.

Stage commands, cache decisions and delivery outcomes are logged at DEBUG;
pass --verbose to see them.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("yttxt")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the yttxt package.

    Args:
        verbose: If True, enable DEBUG level logging; otherwise WARNING level
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
    logger.setLevel(level)
