"""
Workout session repository.

Handles database operations for :class:`WorkoutSession`.  "Active"
queries exclude soft-deleted sessions; lookups by id do not, because the
ledger of a soft-deleted session stays reachable.
"""

import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from repforge.models.workout_session import WorkoutSession


class WorkoutSessionRepository:
    """Repository for WorkoutSession database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: WorkoutSession) -> WorkoutSession:
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, entry_id: int) -> Optional[WorkoutSession]:
        return self.session.get(WorkoutSession, entry_id)

    def get_active(self, entry_id: int) -> Optional[WorkoutSession]:
        entry = self.get_by_id(entry_id)
        if entry is None or entry.is_deleted:
            return None
        return entry

    def list_active_by_creator(self, creator_id: int, is_template: Optional[bool] = None,
                               category: Optional[str] = None,
                               difficulty: Optional[str] = None, ) -> list[WorkoutSession]:
        statement = select(WorkoutSession).where(WorkoutSession.creator_id == creator_id,
                                                 WorkoutSession.is_deleted == False,  # noqa: E712
                                                 )
        if is_template is not None:
            statement = statement.where(WorkoutSession.is_template == is_template)
        if category:
            statement = statement.where(WorkoutSession.category == category)
        if difficulty:
            statement = statement.where(WorkoutSession.difficulty == difficulty)
        statement = statement.order_by(WorkoutSession.created_at.desc(), WorkoutSession.id.desc())
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Public catalogue
    # ------------------------------------------------------------------

    def _public_filter(self, statement, exclude_creator_id: int, category: Optional[str],
                       difficulty: Optional[str], ):
        statement = statement.where(WorkoutSession.is_public == True,  # noqa: E712
                                    WorkoutSession.is_deleted == False,  # noqa: E712
                                    WorkoutSession.creator_id != exclude_creator_id, )
        if category:
            statement = statement.where(WorkoutSession.category == category)
        if difficulty:
            statement = statement.where(WorkoutSession.difficulty == difficulty)
        return statement

    def list_public(self, exclude_creator_id: int, category: Optional[str] = None,
                    difficulty: Optional[str] = None, skip: int = 0, limit: int = 20, ) -> list[WorkoutSession]:
        statement = self._public_filter(select(WorkoutSession), exclude_creator_id, category, difficulty)
        statement = statement.order_by(WorkoutSession.created_at.desc(), WorkoutSession.id.desc()).offset(
            skip).limit(limit)
        return list(self.session.exec(statement).all())

    def count_public(self, exclude_creator_id: int, category: Optional[str] = None,
                     difficulty: Optional[str] = None, ) -> int:
        statement = self._public_filter(select(func.count()).select_from(WorkoutSession), exclude_creator_id,
                                        category, difficulty)
        return self.session.exec(statement).first() or 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def save(self, entry: WorkoutSession) -> WorkoutSession:
        entry.updated_at = datetime.datetime.utcnow()
        self.session.add(entry)
        self.session.flush()
        return entry

    def soft_delete(self, entry: WorkoutSession) -> WorkoutSession:
        """Hide the session.  Its completions are left untouched."""
        entry.is_deleted = True
        entry.deleted_at = datetime.datetime.utcnow()
        return self.save(entry)
