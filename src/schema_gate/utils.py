"""Logging setup for schema-gate."""

import sys

import logfire
from loguru import logger

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {extra} {message}"


def setup_logging(log_level: str = "INFO", configure_logfire: bool = True) -> None:
    """Route loguru output to stderr at the given level.

    Logfire spans are only exported when a LOGFIRE_TOKEN is present.
    """
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=LOG_FORMAT, colorize=True, backtrace=False)

    if configure_logfire:
        logfire.configure(
            service_name="schema-gate",
            send_to_logfire="if-token-present",
            console=False,
        )
