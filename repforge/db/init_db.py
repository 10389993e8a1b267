"""
Database initialization.

Creates all tables straight from the SQLModel metadata.  Production
databases go through the Alembic migrations instead.
"""

import logging

from sqlmodel import SQLModel

from repforge.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None) -> None:
    """Create every table that does not exist yet."""
    import repforge.db.base  # noqa: F401

    bind = bind if bind is not None else engine
    logger.info("Creating database tables on %s", bind.url.render_as_string(hide_password=True))
    SQLModel.metadata.create_all(bind)
    logger.info("Tables created: %s", ", ".join(sorted(SQLModel.metadata.tables)))


if __name__ == "__main__":
    from repforge.core.logging import configure_logging

    configure_logging()
    init_db()
