"""Logging setup for the API process."""

from __future__ import annotations

import logging

from klasmwen.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once for the running process.

    Args:
        level: Optional level name overriding ``settings.log_level``.
    """
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("klasmwen").setLevel(resolved)
    # SQL echo is controlled by SQL_DEBUG on the engine, keep the logger quiet otherwise.
    if not settings.sql_debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
