"""Utility functions for logprobe."""

from __future__ import annotations

import logging


def enable_debug(level: str | int = "INFO") -> None:
    """Enable logging for logprobe.

    This surfaces the records ``wait_for`` observes when its ``debug``
    option is set, and the lines a sink drops at DEBUG level.

    Note: This configures the 'logprobe' logger. It does not modify the root
    logger, but if the 'logprobe' logger has no handler yet, a StreamHandler
    is added, which may duplicate output once the root logger is configured.

    Args:
        level: Logging level (e.g., "DEBUG", "INFO", logging.DEBUG).
    """
    logger = logging.getLogger("logprobe")
    logger.setLevel(level)

    # Add handler if not present
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
