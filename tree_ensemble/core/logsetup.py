"""loguru sink setup shared by scripts that embed the loader."""
from __future__ import annotations
import sys
from loguru import logger


def setup_logging(level: str = "INFO", serialize: bool = False) -> None:
    """Replace loguru's default sink with a single stderr sink at `level`."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        serialize=serialize,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {message}",
    )


__all__ = ["setup_logging"]
