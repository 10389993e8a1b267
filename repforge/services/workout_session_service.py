"""
Workout session service.

Session plans: creation, listing, update, soft delete and duplication.
Soft delete only hides a session; its ledger and the aggregate
contributions of its completions are left exactly as they were.
"""

import logging
import math
from typing import Optional

from sqlmodel import Session

from repforge.core.errors import NotFoundError
from repforge.db.repositories.completion import CompletionRepository
from repforge.db.repositories.workout_session import WorkoutSessionRepository
from repforge.db.session import storage_errors, transaction
from repforge.schemas.completion import MAX_SESSION_MINUTES
from repforge.models.workout_session import WorkoutSession
from repforge.schemas.workout_session import (Pagination, PlannedExercise, PublicSessionPage, WorkoutSessionCreate,
                                              WorkoutSessionResponse, WorkoutSessionUpdate, )

logger = logging.getLogger(__name__)

# Assumed per-set work time and rest when the plan leaves them empty (seconds).
DEFAULT_SET_SECONDS = 30
DEFAULT_REST_SECONDS = 60

COPY_SUFFIX = " (Copie)"


def estimate_duration(exercises: list[PlannedExercise]) -> int:
    """Estimated session length in minutes: work plus rest of every planned set, rounded up and capped at a day."""
    total = 0
    for exercise in exercises:
        for s in exercise.sets:
            total += (s.duration or DEFAULT_SET_SECONDS) + (s.rest_time or DEFAULT_REST_SECONDS)
    return min(math.ceil(total / 60), MAX_SESSION_MINUTES)


def _plan_to_storage(exercises: list[PlannedExercise]) -> list[dict]:
    stored = []
    for index, exercise in enumerate(exercises):
        data = exercise.model_dump()
        data["order"] = exercise.order or index + 1
        stored.append(data)
    return stored


class WorkoutSessionService:
    """Service for workout session business logic."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = WorkoutSessionRepository(session)
        self.completions = CompletionRepository(session)

    def create(self, user_id: int, data: WorkoutSessionCreate) -> WorkoutSessionResponse:
        entry = WorkoutSession(creator_id=user_id, name=data.name.strip(), description=data.description,
                               exercises=_plan_to_storage(data.exercises),
                               estimated_duration=data.estimated_duration or estimate_duration(data.exercises),
                               difficulty=data.difficulty, category=data.category, tags=list(data.tags),
                               is_public=data.is_public, is_template=data.is_template, )
        with transaction(self.session, "session.create"):
            entry = self.repository.add(entry)
        logger.info("User %s created session %s", user_id, entry.id)
        return self._to_response(entry, user_id)

    def get(self, user_id: int, session_id: int) -> WorkoutSessionResponse:
        """An active session the user owns, or an active public one."""
        with storage_errors(self.session, "session.get"):
            entry = self.repository.get_active(session_id)
            if entry is None or (entry.creator_id != user_id and not entry.is_public):
                raise NotFoundError("Session not found")
            return self._to_response(entry, user_id)

    def list_own(self, user_id: int, is_template: Optional[bool] = None, category: Optional[str] = None,
                 difficulty: Optional[str] = None, ) -> list[WorkoutSessionResponse]:
        with storage_errors(self.session, "session.list_own"):
            entries = self.repository.list_active_by_creator(user_id, is_template, category, difficulty)
            return self._to_responses(entries, user_id)

    def list_public(self, user_id: int, category: Optional[str] = None, difficulty: Optional[str] = None,
                    page: int = 1, limit: int = 20, ) -> PublicSessionPage:
        skip = (page - 1) * limit
        with storage_errors(self.session, "session.list_public"):
            entries = self.repository.list_public(user_id, category, difficulty, skip=skip, limit=limit)
            total = self.repository.count_public(user_id, category, difficulty)
            responses = self._to_responses(entries, user_id)
        return PublicSessionPage(sessions=responses,
                                 pagination=Pagination(current_page=page, total_pages=math.ceil(total / limit),
                                                       total_sessions=total, has_next=skip + len(entries) < total,
                                                       has_prev=page > 1, ), )

    def update(self, user_id: int, session_id: int, data: WorkoutSessionUpdate) -> WorkoutSessionResponse:
        entry = self._get_owned_active(user_id, session_id)

        if data.name is not None:
            entry.name = data.name.strip()
        if data.description is not None:
            entry.description = data.description
        if data.difficulty is not None:
            entry.difficulty = data.difficulty
        if data.category is not None:
            entry.category = data.category
        if data.tags is not None:
            entry.tags = list(data.tags)
        if data.is_public is not None:
            entry.is_public = data.is_public
        if data.exercises is not None:
            entry.exercises = _plan_to_storage(data.exercises)
            if data.estimated_duration is None:
                entry.estimated_duration = estimate_duration(data.exercises)
        if data.estimated_duration is not None:
            entry.estimated_duration = data.estimated_duration

        with transaction(self.session, "session.update"):
            entry = self.repository.save(entry)
        return self._to_response(entry, user_id)

    def soft_delete(self, user_id: int, session_id: int) -> int:
        """Hide a session the user owns.

        Returns:
            Number of completions kept in its ledger.
        """
        entry = self.repository.get_by_id(session_id)
        if entry is None or entry.creator_id != user_id:
            raise NotFoundError("Session not found")

        with transaction(self.session, "session.delete"):
            self.repository.soft_delete(entry)
        kept = self.completions.count_by_sessions([session_id])[session_id]
        logger.info("Session %s soft-deleted by user %s, %d completions kept", session_id, user_id, kept)
        return kept

    def duplicate(self, user_id: int, session_id: int) -> WorkoutSessionResponse:
        """Copy an active session (own or public) into a new private plan with an empty ledger."""
        original = self.repository.get_active(session_id)
        if original is None or (original.creator_id != user_id and not original.is_public):
            raise NotFoundError("Session not found")

        exercises = []
        for exercise in original.exercises:
            copied = dict(exercise)
            copied["sets"] = [dict(s) for s in exercise.get("sets", [])]
            exercises.append(copied)

        copy = WorkoutSession(creator_id=user_id, name=f"{original.name}{COPY_SUFFIX}",
                              description=original.description, exercises=exercises,
                              estimated_duration=original.estimated_duration, difficulty=original.difficulty,
                              category=original.category, tags=list(original.tags), is_public=False,
                              is_template=False, )
        with transaction(self.session, "session.duplicate"):
            copy = self.repository.add(copy)
        logger.info("User %s duplicated session %s into %s", user_id, session_id, copy.id)
        return self._to_response(copy, user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned_active(self, user_id: int, session_id: int) -> WorkoutSession:
        entry = self.repository.get_active(session_id)
        if entry is None or entry.creator_id != user_id:
            raise NotFoundError("Session not found")
        return entry

    def _to_responses(self, entries: list[WorkoutSession], user_id: int) -> list[WorkoutSessionResponse]:
        counts = self.completions.count_by_sessions(e.id for e in entries)
        return [self._build_response(e, counts[e.id], user_id) for e in entries]

    def _to_response(self, entry: WorkoutSession, user_id: int) -> WorkoutSessionResponse:
        count = self.completions.count_by_sessions([entry.id])[entry.id]
        return self._build_response(entry, count, user_id)

    @staticmethod
    def _build_response(entry: WorkoutSession, completions_count: int, user_id: int) -> WorkoutSessionResponse:
        return WorkoutSessionResponse(id=entry.id, creator_id=entry.creator_id, name=entry.name,
                                      description=entry.description, difficulty=entry.difficulty,
                                      category=entry.category, estimated_duration=entry.estimated_duration,
                                      exercises=entry.exercises, tags=entry.tags, is_public=entry.is_public,
                                      is_template=entry.is_template, completions_count=completions_count,
                                      is_owner=entry.creator_id == user_id, created_at=entry.created_at,
                                      updated_at=entry.updated_at, )
