"""Logging setup for the API process."""

import logging

from repforge.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, from ``settings.LOG_LEVEL`` by default."""
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # SQL echo is controlled by DEBUG on the engine, keep the pool quiet.
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
