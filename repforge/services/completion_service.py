"""
Completion ledger service.

Creates, corrects and removes completion records and keeps the user's
progression account equal to the sum of their deltas.

Every mutation follows the same protocol, inside one transaction:

1. lock the account row,
2. validate the content (nothing is written if it is malformed),
3. compute the delta(s) from the content, the stored one being read
   *before* the record is modified,
4. write the ledger change,
5. apply the delta to the account as an atomic SQL increment and
   re-derive the level from the resulting xp,
6. commit.

A failure at any step rolls back both the ledger and the account.

=========  ===================================  ==================
Operation  Account change                       Sessions completed
=========  ===================================  ==================
create     ``+ delta(new)``                     ``+ 1``
update     ``+ (delta(new) - delta(stored))``   unchanged
delete     ``- delta(stored)``                  ``- 1``
=========  ===================================  ==================

Decrements are clamped at zero.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from repforge.core.config import settings
from repforge.core.errors import AlreadyExistsError, ContentValidationError, InternalStorageError, NotFoundError
from repforge.db.repositories.completion import CompletionRepository
from repforge.db.repositories.progression_account import ProgressionAccountRepository
from repforge.db.repositories.workout_session import WorkoutSessionRepository
from repforge.db.session import storage_errors, transaction
from repforge.models.completion import CompletionRecord
from repforge.models.progression_account import ProgressionAccount
from repforge.models.workout_session import WorkoutSession
from repforge.progression.deltas import CompletionDelta, compute_delta
from repforge.progression.reconcile import record_content
from repforge.schemas.completion import CompletionContent, CompletionCreate, CompletionResponse, CompletionUpdate
from repforge.schemas.progression import (CompletionCreateResponse, CompletionDeleteResponse,
                                          CompletionUpdateResponse, CreateReport, DeleteReport, UpdateReport, )
from repforge.services.progression_service import to_snapshot

logger = logging.getLogger(__name__)

COMPLETION_NOT_FOUND = "Completion not found"


def validate_content(raw: dict[str, Any]) -> CompletionContent:
    """Build a :class:`CompletionContent` or raise :class:`ContentValidationError`."""
    try:
        return CompletionContent.model_validate(raw)
    except ValidationError as e:
        errors = [{ "loc": list(err["loc"]), "msg": err["msg"] } for err in e.errors()]
        raise ContentValidationError("Invalid completion content", errors=errors) from e


def content_from_plan(session: WorkoutSession) -> list[dict[str, Any]]:
    """The session's planned exercises with every set marked not completed."""
    return [{ "name": exercise.get("name"), "category": exercise.get("category"),
              "sets": [{ "reps": s.get("reps"), "weight": s.get("weight"), "duration": s.get("duration") or 0,
                         "distance": s.get("distance") or 0, "completed": False, } for s in
                       exercise.get("sets", [])], } for exercise in session.exercises]


class CompletionService:
    """Service for the completion ledger and its account bookkeeping."""

    def __init__(self, session: Session):
        self.session = session
        self.sessions = WorkoutSessionRepository(session)
        self.completions = CompletionRepository(session)
        self.accounts = ProgressionAccountRepository(session)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, user_id: int, session_id: int, data: CompletionCreate,
               idempotency_key: Optional[str] = None, ) -> CompletionCreateResponse:
        """Record a performance of an active session and credit the account."""
        key = data.idempotency_key or idempotency_key
        with storage_errors(self.session, "completion.create"):
            if key:
                existing = self.completions.get_by_idempotency_key(user_id, key)
                if existing is not None:
                    return self._replay(existing, session_id)

            workout = self.sessions.get_active(session_id)
        # Own sessions and public sessions of other users can be completed.
        if workout is None or (workout.creator_id != user_id and not workout.is_public):
            raise NotFoundError("Session not found")

        content = validate_content({
            "actual_duration": (data.actual_duration if data.actual_duration is not None
                                else workout.estimated_duration or settings.DEFAULT_SESSION_DURATION),
            "notes": data.notes or "",
            "exercises": ([e.model_dump() for e in data.exercises] if data.exercises else content_from_plan(workout)),
        })
        delta = compute_delta(content)

        try:
            with transaction(self.session, "completion.create", expected=(IntegrityError,) if key else ()):
                account = self._lock_account(user_id)
                old_level = account.level
                record = self.completions.add(
                    CompletionRecord(user_id=user_id, session_id=session_id, idempotency_key=key,
                                     **content.to_storage()))
                account = self.accounts.apply_delta(user_id, delta, sessions=1)
        except InternalStorageError as e:
            # Two requests raced with the same key: the loser replays the winner.
            if key and isinstance(e.__cause__, IntegrityError):
                with storage_errors(self.session, "completion.create"):
                    existing = self.completions.get_by_idempotency_key(user_id, key)
                if existing is not None:
                    return self._replay(existing, session_id)
            raise

        report = CreateReport(xp_gained=delta.xp, weight_gained=delta.weight, duration_applied=delta.duration,
                              level_up=account.level > old_level, levels_gained=account.level - old_level,
                              old_level=old_level, new_level=account.level, )
        logger.info("Completion %s created: user=%s session=%s xp=%+d weight=%+.1f duration=%+d level %d->%d",
                    record.id, user_id, session_id, delta.xp, delta.weight, delta.duration, old_level,
                    account.level)
        return CompletionCreateResponse(completion=self._to_response(record, workout), report=report,
                                        account=to_snapshot(account), )

    def _replay(self, record: CompletionRecord, session_id: int) -> CompletionCreateResponse:
        if record.session_id != session_id:
            raise AlreadyExistsError("Idempotency key already used for another session")

        delta = self._stored_delta(record)
        account = self.accounts.get_by_user(record.user_id)
        if account is None:
            raise NotFoundError("Progression account not found")
        report = CreateReport(xp_gained=delta.xp, weight_gained=delta.weight, duration_applied=delta.duration,
                              level_up=False, levels_gained=0, old_level=account.level, new_level=account.level, )
        logger.info("Completion %s replayed for idempotency key %r, nothing applied", record.id,
                    record.idempotency_key)
        return CompletionCreateResponse(completion=self._to_response(record), report=report,
                                        account=to_snapshot(account), replayed=True, )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, user_id: int, session_id: int, completion_id: int,
               data: CompletionUpdate) -> CompletionUpdateResponse:
        """Correct a recorded completion and apply the difference of deltas."""
        with transaction(self.session, "completion.update"):
            # Records are only read under the account lock, so the stored
            # content cannot change between the diff and the write.
            account = self._lock_account(user_id)
            record = self._get_owned_record(user_id, session_id, completion_id)

            stored = validate_content(record_content(record))
            merged = validate_content({
                "actual_duration": data.actual_duration if data.actual_duration is not None else stored.actual_duration,
                "notes": data.notes if data.notes is not None else stored.notes,
                "exercises": ([e.model_dump() for e in data.exercises] if data.exercises is not None else [
                    e.model_dump() for e in stored.exercises]),
            })

            # Diff against the content as stored, before the record changes.
            diff = compute_delta(merged) - compute_delta(stored)

            for column, value in merged.to_storage().items():
                setattr(record, column, value)
            record = self.completions.save(record)
            if not diff.is_zero:
                account = self.accounts.apply_delta(user_id, diff)

        logger.info("Completion %s updated: user=%s xp=%+d weight=%+.1f duration=%+d", completion_id, user_id,
                    diff.xp, diff.weight, diff.duration)
        return CompletionUpdateResponse(completion=self._to_response(record),
                                        report=UpdateReport(xp_diff=diff.xp, weight_diff=diff.weight,
                                                            duration_diff=diff.duration),
                                        account=to_snapshot(account), )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, user_id: int, session_id: int, completion_id: int) -> CompletionDeleteResponse:
        """Remove a completion and withdraw its contribution."""
        with transaction(self.session, "completion.delete"):
            self._lock_account(user_id)
            record = self._get_owned_record(user_id, session_id, completion_id)
            delta = self._stored_delta(record)
            self.completions.remove(record)
            account = self.accounts.apply_delta(user_id, -delta, sessions=-1)

        logger.info("Completion %s deleted: user=%s xp=-%d weight=-%.1f duration=-%d", completion_id, user_id,
                    delta.xp, delta.weight, delta.duration)
        return CompletionDeleteResponse(report=DeleteReport(xp_removed=delta.xp, weight_removed=delta.weight,
                                                            duration_removed=delta.duration),
                                        account=to_snapshot(account), )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, user_id: int, session_id: int, completion_id: int) -> CompletionResponse:
        with storage_errors(self.session, "completion.get"):
            record = self._get_owned_record(user_id, session_id, completion_id)
            return self._to_response(record)

    def list_for_session(self, user_id: int, session_id: int) -> list[CompletionResponse]:
        """The user's entries in one session's ledger, soft-deleted session included."""
        with storage_errors(self.session, "completion.list_for_session"):
            workout = self.sessions.get_by_id(session_id)
            if workout is None:
                raise NotFoundError("Session not found")
            records = self.completions.list_by_session_and_user(session_id, user_id)
            return [self._to_response(r, workout) for r in records]

    def list_history(self, user_id: int) -> list[CompletionResponse]:
        """All of the user's completions, newest first."""
        with storage_errors(self.session, "completion.list_history"):
            return [self._to_response(record, workout) for record, workout in self.completions.list_history(user_id)]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned_record(self, user_id: int, session_id: int, completion_id: int) -> CompletionRecord:
        record = self.completions.get_in_session(session_id, completion_id)
        # Someone else's record looks exactly like a missing one.
        if record is None or record.user_id != user_id:
            raise NotFoundError(COMPLETION_NOT_FOUND)
        return record

    def _lock_account(self, user_id: int) -> ProgressionAccount:
        account = self.accounts.get_for_update(user_id)
        if account is None:
            raise NotFoundError("Progression account not found")
        return account

    @staticmethod
    def _stored_delta(record: CompletionRecord) -> CompletionDelta:
        return compute_delta(validate_content(record_content(record)))

    def _to_response(self, record: CompletionRecord, workout: Optional[WorkoutSession] = None) -> CompletionResponse:
        if workout is None:
            workout = self.sessions.get_by_id(record.session_id)
        content = validate_content(record_content(record))
        return CompletionResponse(id=record.id, user_id=record.user_id, session_id=record.session_id,
                                  session_name=workout.name if workout else None,
                                  session_is_deleted=workout.is_deleted if workout else False,
                                  completed_at=record.completed_at, actual_duration=content.actual_duration,
                                  notes=content.notes, exercises=content.exercises,
                                  xp_gained=compute_delta(content).xp, created_at=record.created_at,
                                  updated_at=record.updated_at, )
