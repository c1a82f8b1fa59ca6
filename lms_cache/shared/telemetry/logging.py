"""Logging configuration for the cache service."""

import logging
import sys

from lms_cache.core.config import get_settings


def setup_logging() -> None:
    """Configure process-wide logging.

    Level is DEBUG when settings.debug is True (cache HIT/MISS/SET lines
    become visible), otherwise INFO. Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # redis-py logs every retry at DEBUG; keep it quieter than our own cache lines.
    logging.getLogger("redis").setLevel(max(log_level, logging.INFO))

