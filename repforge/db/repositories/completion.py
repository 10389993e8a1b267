"""
Completion repository.

Handles database operations for :class:`CompletionRecord`, the ledger.
Methods stage and flush; committing is left to the service's
:func:`~repforge.db.session.transaction` so that the ledger write and the
account write share one transaction.
"""

import datetime
from typing import Iterable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from repforge.models.completion import CompletionRecord
from repforge.models.workout_session import WorkoutSession


class CompletionRepository:
    """Repository for CompletionRecord database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, record: CompletionRecord) -> CompletionRecord:
        self.session.add(record)
        self.session.flush()
        return record

    def get_by_id(self, record_id: int) -> Optional[CompletionRecord]:
        # Always re-read: callers diff against the stored content.
        return self.session.get(CompletionRecord, record_id, populate_existing=True)

    def get_in_session(self, session_id: int, record_id: int) -> Optional[CompletionRecord]:
        """Get a record only if it belongs to the ledger of *session_id*."""
        record = self.get_by_id(record_id)
        if record is None or record.session_id != session_id:
            return None
        return record

    def get_by_idempotency_key(self, user_id: int, key: str) -> Optional[CompletionRecord]:
        statement = select(CompletionRecord).where(CompletionRecord.user_id == user_id,
                                                   CompletionRecord.idempotency_key == key, )
        return self.session.exec(statement).first()

    # ------------------------------------------------------------------
    # Ledger views
    # ------------------------------------------------------------------

    def list_by_session_and_user(self, session_id: int, user_id: int) -> list[CompletionRecord]:
        """The user's entries of one session's ledger, oldest first."""
        statement = (select(CompletionRecord).where(CompletionRecord.session_id == session_id,
                                                    CompletionRecord.user_id == user_id, ).order_by(
            CompletionRecord.completed_at, CompletionRecord.id))
        return list(self.session.exec(statement).all())

    def list_history(self, user_id: int) -> list[tuple[CompletionRecord, WorkoutSession]]:
        """All of the user's completions with their session, newest first.

        Soft-deleted sessions are included: history is permanent.
        """
        statement = (select(CompletionRecord, WorkoutSession).join(WorkoutSession,
                                                                   CompletionRecord.session_id == WorkoutSession.id).where(
            CompletionRecord.user_id == user_id).order_by(CompletionRecord.completed_at.desc(),
                                                          CompletionRecord.id.desc()))
        return [(record, session) for record, session in self.session.exec(statement).all()]

    def list_by_user(self, user_id: int) -> list[CompletionRecord]:
        """Every completion of the user, for ledger replay."""
        statement = select(CompletionRecord).where(CompletionRecord.user_id == user_id).order_by(
            CompletionRecord.id)
        return list(self.session.exec(statement).all())

    def count_by_sessions(self, session_ids: Iterable[int]) -> dict[int, int]:
        """Number of ledger entries per session id (all users)."""
        ids = list(session_ids)
        if not ids:
            return { }
        statement = (select(CompletionRecord.session_id, func.count()).where(
            CompletionRecord.session_id.in_(ids)).group_by(CompletionRecord.session_id))
        counts = { session_id: count for session_id, count in self.session.exec(statement).all() }
        return { session_id: counts.get(session_id, 0) for session_id in ids }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def save(self, record: CompletionRecord) -> CompletionRecord:
        record.updated_at = datetime.datetime.utcnow()
        self.session.add(record)
        self.session.flush()
        return record

    def remove(self, record: CompletionRecord) -> None:
        self.session.delete(record)
        self.session.flush()
