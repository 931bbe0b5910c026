# core/logging.py
import sys

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    """Route loguru to stderr at ``level`` (replaces any previous sinks)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        ),
    )
