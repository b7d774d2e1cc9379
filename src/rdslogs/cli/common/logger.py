"""
Logging configuration using loguru.

Core modules log through the shared loguru logger; the CLI routes those
records to stderr so they never mix with Rich output on stdout.
"""

import sys

from loguru import logger

DEFAULT_LOG_LEVEL = "WARNING"


def _text_formatter(record: dict) -> str:
    """Format a log record, showing extras only when there are any."""
    base_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
        "<level>{message}</level>"
    )

    if record["extra"]:
        base_format += " | {extra}"

    return base_format + "\n{exception}"


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Replace loguru's default sink with a stderr sink at `level`."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=_text_formatter,
        level=level.upper(),
        colorize=None,
    )
