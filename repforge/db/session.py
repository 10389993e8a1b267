"""
Database session management.

Provides the SQLModel engine, the FastAPI session dependency and the
:func:`transaction` unit of work used by every mutating service call, and
:func:`storage_errors` for the read-only ones.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from repforge.core.config import settings
from repforge.core.errors import InternalStorageError

logger = logging.getLogger(__name__)

DATABASE_URL: str = settings.DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return { "connect_args": { "check_same_thread": False } }
    return { "pool_pre_ping": True,  # Verify connections before using
             "pool_size": 5,  # Connection pool size
             "max_overflow": 10,  # Max connections beyond pool_size
             }


engine = create_engine(DATABASE_URL, echo=settings.DEBUG, **_engine_kwargs(DATABASE_URL))


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Yields:
        SQLModel Session instance
    """
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session, operation: str,
                expected: Tuple[Type[SQLAlchemyError], ...] = ()) -> Iterator[Session]:
    """Run a block as one database transaction.

    Commits on success.  On any error the transaction is rolled back, so
    a ledger write never lands without its account write (or the other
    way round).  SQLAlchemy failures are logged with detail and re-raised
    as :class:`InternalStorageError`; domain errors propagate unchanged.

    Args:
        session: Session the repositories were built on.
        operation: Short label used in log lines, e.g. ``"completion.create"``.
        expected: Storage errors the caller recovers from; they are logged
            at INFO without a traceback.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        if isinstance(e, expected):
            logger.info("%s during %s, transaction rolled back", type(e).__name__, operation)
        else:
            logger.error("Storage failure during %s, transaction rolled back", operation, exc_info=True)
        raise InternalStorageError() from e
    except Exception:
        session.rollback()
        raise


@contextmanager
def storage_errors(session: Session, operation: str) -> Iterator[Session]:
    """Map SQLAlchemy failures of a read to :class:`InternalStorageError`."""
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Storage failure during %s", operation, exc_info=True)
        raise InternalStorageError() from e
