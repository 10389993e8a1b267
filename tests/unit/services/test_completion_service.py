"""Tests for the completion ledger service.

These run against an in-memory SQLite database and check the account
after every ledger operation.
"""

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from repforge.core.errors import (AlreadyExistsError, ContentValidationError, InternalStorageError,
                                  NotFoundError, )
from repforge.db.repositories.progression_account import ProgressionAccountRepository
from repforge.models.completion import CompletionRecord
from repforge.models.progression_account import ProgressionAccount
from repforge.schemas.completion import CompletionCreate, CompletionExercise, CompletionSet, CompletionUpdate
from repforge.services.completion_service import CompletionService, validate_content
from repforge.services.progression_service import ProgressionService
from repforge.services.workout_session_service import WorkoutSessionService


# ======================================================================
# Helpers
# ======================================================================


def _sets(count: int, weight: float = 50.0, reps: int = 10, completed: bool = True) -> list[dict]:
    return [{"reps": reps, "weight": weight, "completed": completed} for _ in range(count)]


def _performed(sets: list[dict], duration: int = 45, **extra) -> CompletionCreate:
    return CompletionCreate.model_validate({
        "actual_duration": duration,
        "exercises": [{"name": "Bench press", "category": "Pectoraux", "sets": sets}],
        **extra,
    })


def _account(db, user_id: int):
    return ProgressionService(db).get_snapshot(user_id)


def _totals(snapshot) -> tuple:
    return (snapshot.xp, snapshot.level, snapshot.total_sessions_completed, snapshot.stats.total_workout_time,
            snapshot.stats.total_weight_lifted)


# ======================================================================
# create
# ======================================================================


class TestCreate:
    def test_three_weighted_sets(self, db, user, workout):
        result = CompletionService(db).create(user.id, workout.id, _performed(_sets(3)))

        assert result.report.xp_gained == 30
        assert result.report.weight_gained == 1500.0
        assert result.report.level_up is False
        assert result.account.xp == 30
        assert result.account.level == 1
        assert result.account.stats.total_weight_lifted == 1500.0
        assert result.account.stats.total_workout_time == 45
        assert result.account.total_sessions_completed == 1
        assert result.completion.xp_gained == 30
        assert result.completion.session_name == "Upper body"

    def test_level_up(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(9, weight=0.0)))
        assert _account(db, user.id).xp == 90

        result = service.create(user.id, workout.id, _performed(_sets(2, weight=0.0)))

        assert result.account.xp == 110
        assert result.account.level == 2
        assert result.report.level_up is True
        assert result.report.levels_gained == 1
        assert (result.report.old_level, result.report.new_level) == (1, 2)

    def test_defaults_from_plan(self, db, user, workout):
        result = CompletionService(db).create(user.id, workout.id, CompletionCreate())

        # Planned sets are recorded as not completed
        assert [len(e.sets) for e in result.completion.exercises] == [3, 2]
        assert all(not s.completed for e in result.completion.exercises for s in e.sets)
        assert result.report.xp_gained == 0
        assert result.completion.actual_duration == workout.estimated_duration
        assert result.account.stats.total_workout_time == workout.estimated_duration
        assert result.account.total_sessions_completed == 1

    def test_explicit_zero_duration_is_kept(self, db, user, workout):
        result = CompletionService(db).create(user.id, workout.id, _performed(_sets(1), duration=0))
        assert result.completion.actual_duration == 0
        assert result.account.stats.total_workout_time == 0

    def test_public_session_of_another_user(self, db, user, other_user, make_plan):
        shared = WorkoutSessionService(db).create(other_user.id, make_plan(is_public=True))
        result = CompletionService(db).create(user.id, shared.id, _performed(_sets(2)))
        assert result.completion.user_id == user.id
        assert _account(db, user.id).xp == 20
        assert _account(db, other_user.id).xp == 0

    def test_private_session_of_another_user(self, db, user, other_user, workout):
        with pytest.raises(NotFoundError):
            CompletionService(db).create(other_user.id, workout.id, _performed(_sets(2)))
        assert _account(db, other_user.id).total_sessions_completed == 0

    def test_unknown_session(self, db, user):
        with pytest.raises(NotFoundError):
            CompletionService(db).create(user.id, 999, _performed(_sets(1)))


# ======================================================================
# Idempotency
# ======================================================================


class TestIdempotency:
    def test_same_key_is_applied_once(self, db, user, workout):
        service = CompletionService(db)
        first = service.create(user.id, workout.id, _performed(_sets(3)), idempotency_key="run-1")
        second = service.create(user.id, workout.id, _performed(_sets(3)), idempotency_key="run-1")

        assert first.replayed is False
        assert second.replayed is True
        assert second.completion.id == first.completion.id
        assert _account(db, user.id).xp == 30
        assert _account(db, user.id).total_sessions_completed == 1

    def test_key_in_body(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(1), idempotency_key="body-key"))
        replay = service.create(user.id, workout.id, _performed(_sets(1), idempotency_key="body-key"))
        assert replay.replayed is True
        assert len(service.list_history(user.id)) == 1

    def test_key_reused_for_another_session(self, db, user, workout, make_plan):
        other = WorkoutSessionService(db).create(user.id, make_plan(name="Legs"))
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(1)), idempotency_key="k")
        with pytest.raises(AlreadyExistsError):
            service.create(user.id, other.id, _performed(_sets(1)), idempotency_key="k")

    def test_keys_are_per_user(self, db, user, other_user, make_plan):
        shared = WorkoutSessionService(db).create(user.id, make_plan(is_public=True))
        service = CompletionService(db)
        service.create(user.id, shared.id, _performed(_sets(1)), idempotency_key="k")
        result = service.create(other_user.id, shared.id, _performed(_sets(1)), idempotency_key="k")
        assert result.replayed is False
        assert _account(db, other_user.id).xp == 10


# ======================================================================
# update
# ======================================================================


class TestUpdate:
    def test_applies_difference(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))

        result = service.update(user.id, workout.id, created.completion.id,
                                CompletionUpdate.model_validate({"exercises": [
                                    {"name": "Bench press", "sets": _sets(4, weight=60.0)}]}))

        assert result.report.xp_diff == 10
        assert result.report.weight_diff == 900.0
        assert result.report.duration_diff == 0
        assert result.account.xp == 40
        assert result.account.stats.total_weight_lifted == 2400.0
        assert result.account.total_sessions_completed == 1

    def test_duration_only(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3), duration=45))
        result = service.update(user.id, workout.id, created.completion.id, CompletionUpdate(actual_duration=50))
        assert result.report.duration_diff == 5
        assert result.account.stats.total_workout_time == 50
        assert result.completion.exercises == created.completion.exercises

    def test_same_update_twice_changes_nothing_more(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        data = CompletionUpdate.model_validate({"actual_duration": 30, "exercises": [
            {"name": "Bench press", "sets": _sets(1)}]})

        service.update(user.id, workout.id, created.completion.id, data)
        after_first = _account(db, user.id)
        second = service.update(user.id, workout.id, created.completion.id, data)

        assert second.report.xp_diff == 0
        assert second.report.weight_diff == 0.0
        assert second.report.duration_diff == 0
        assert _totals(_account(db, user.id)) == _totals(after_first)

    def test_level_down(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(11, weight=0.0)))
        assert created.account.level == 2

        result = service.update(user.id, workout.id, created.completion.id,
                                CompletionUpdate.model_validate({"exercises": [{"name": "Dips", "sets": _sets(2)}]}))
        assert result.account.xp == 20
        assert result.account.level == 1

    def test_notes(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(1)))
        result = service.update(user.id, workout.id, created.completion.id, CompletionUpdate(notes=" heavy day "))
        assert result.completion.notes == "heavy day"
        assert result.account.xp == 10

    def test_foreign_record(self, db, user, other_user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        before = _totals(_account(db, user.id))

        with pytest.raises(NotFoundError):
            service.update(other_user.id, workout.id, created.completion.id, CompletionUpdate(actual_duration=1))

        assert _totals(_account(db, user.id)) == before
        assert service.get(user.id, workout.id, created.completion.id).actual_duration == 45

    def test_record_of_another_session(self, db, user, workout, make_plan):
        other = WorkoutSessionService(db).create(user.id, make_plan(name="Legs"))
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        with pytest.raises(NotFoundError):
            service.update(user.id, other.id, created.completion.id, CompletionUpdate(actual_duration=1))

    def test_corrupted_stored_content_is_rejected(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        record = db.get(CompletionRecord, created.completion.id)
        record.exercises = [{"name": "Bench press", "sets": [{"reps": -3, "completed": True}]}]
        db.add(record)
        db.commit()
        before = _totals(_account(db, user.id))

        with pytest.raises(ContentValidationError) as exc_info:
            service.update(user.id, workout.id, created.completion.id, CompletionUpdate(actual_duration=10))

        assert exc_info.value.errors
        assert _totals(_account(db, user.id)) == before


# ======================================================================
# delete
# ======================================================================


class TestDelete:
    def test_returns_to_zero(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))

        result = service.delete(user.id, workout.id, created.completion.id)

        assert result.report.xp_removed == 30
        assert result.report.weight_removed == 1500.0
        assert result.account.xp == 0
        assert result.account.level == 1
        assert result.account.stats.total_weight_lifted == 0.0
        assert result.account.total_sessions_completed == 0
        assert service.list_history(user.id) == []

    def test_create_then_delete_restores_account(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(7, weight=20.0), duration=35))
        before = _totals(_account(db, user.id))

        created = service.create(user.id, workout.id, _performed(_sets(5, weight=42.5, reps=8), duration=50))
        service.delete(user.id, workout.id, created.completion.id)

        assert _totals(_account(db, user.id)) == before

    def test_level_down(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(9, weight=0.0)))
        created = service.create(user.id, workout.id, _performed(_sets(2, weight=0.0)))
        assert _account(db, user.id).level == 2

        result = service.delete(user.id, workout.id, created.completion.id)
        assert result.account.xp == 90
        assert result.account.level == 1

    def test_decrements_are_clamped(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        db.exec(update(ProgressionAccount).where(ProgressionAccount.user_id == user.id).values(xp=5))
        db.commit()

        result = service.delete(user.id, workout.id, created.completion.id)
        assert result.account.xp == 0
        assert result.account.level == 1

    def test_foreign_record(self, db, user, other_user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        with pytest.raises(NotFoundError):
            service.delete(other_user.id, workout.id, created.completion.id)
        assert _account(db, user.id).xp == 30
        assert len(service.list_for_session(user.id, workout.id)) == 1

    def test_unknown_record(self, db, user, workout):
        with pytest.raises(NotFoundError):
            CompletionService(db).delete(user.id, workout.id, 12345)


# ======================================================================
# Soft-deleted sessions
# ======================================================================


class TestSoftDeletedSession:
    def test_history_and_account_survive(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(3)))
        before = _totals(_account(db, user.id))

        kept = WorkoutSessionService(db).soft_delete(user.id, workout.id)

        assert kept == 1
        assert _totals(_account(db, user.id)) == before
        history = service.list_history(user.id)
        assert len(history) == 1
        assert history[0].session_is_deleted is True
        assert len(service.list_for_session(user.id, workout.id)) == 1

    def test_no_new_completions(self, db, user, workout):
        WorkoutSessionService(db).soft_delete(user.id, workout.id)
        with pytest.raises(NotFoundError):
            CompletionService(db).create(user.id, workout.id, _performed(_sets(1)))

    def test_existing_completion_can_still_be_deleted(self, db, user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        WorkoutSessionService(db).soft_delete(user.id, workout.id)

        result = service.delete(user.id, workout.id, created.completion.id)
        assert result.account.xp == 0
        assert result.account.total_sessions_completed == 0


# ======================================================================
# Queries
# ======================================================================


class TestQueries:
    def test_history_is_newest_first(self, db, user, workout):
        service = CompletionService(db)
        first = service.create(user.id, workout.id, _performed(_sets(1)))
        second = service.create(user.id, workout.id, _performed(_sets(2)))
        assert [c.id for c in service.list_history(user.id)] == [second.completion.id, first.completion.id]

    def test_session_ledger_only_lists_own_records(self, db, user, other_user, make_plan):
        shared = WorkoutSessionService(db).create(user.id, make_plan(is_public=True))
        service = CompletionService(db)
        service.create(user.id, shared.id, _performed(_sets(1)))
        service.create(other_user.id, shared.id, _performed(_sets(1)))
        assert len(service.list_for_session(user.id, shared.id)) == 1
        assert len(service.list_for_session(other_user.id, shared.id)) == 1

    def test_get_foreign_record(self, db, user, other_user, workout):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(1)))
        with pytest.raises(NotFoundError):
            service.get(other_user.id, workout.id, created.completion.id)


# ======================================================================
# Bounds and weight precision
# ======================================================================


class TestBounds:
    def test_oversized_duration_rejected_before_any_write(self, db, user, workout):
        data = CompletionCreate.model_construct(actual_duration=2**63)
        with pytest.raises(ContentValidationError):
            CompletionService(db).create(user.id, workout.id, data)

        assert _totals(_account(db, user.id)) == (0, 1, 0, 0, 0.0)
        assert CompletionService(db).list_history(user.id) == []

    def test_non_finite_weight_rejected_before_any_write(self, db, user, workout):
        infinite = CompletionSet.model_construct(reps=1, weight=float("inf"), completed=True)
        data = CompletionCreate.model_construct(
            exercises=[CompletionExercise.model_construct(name="Bench press", sets=[infinite])])
        with pytest.raises(ContentValidationError):
            CompletionService(db).create(user.id, workout.id, data)

        assert _totals(_account(db, user.id)) == (0, 1, 0, 0, 0.0)


class TestWeightPrecision:
    def test_create_and_delete_restore_weight_exactly(self, db, user, workout):
        service = CompletionService(db)
        service.create(user.id, workout.id, _performed(_sets(1, weight=0.1, reps=1)))
        second = service.create(user.id, workout.id, _performed(_sets(1, weight=0.2, reps=1)))
        assert _account(db, user.id).stats.total_weight_lifted == 0.3

        service.delete(user.id, workout.id, second.completion.id)

        assert _account(db, user.id).stats.total_weight_lifted == 0.1
        assert ProgressionService(db).check(user.id).has_drift is False


# ======================================================================
# Storage failures
# ======================================================================


def _failing_apply_delta(self, user_id, delta, sessions=0):
    raise OperationalError("UPDATE progression_accounts", {}, Exception("disk I/O error"))


class TestStorageFailure:
    def test_create_leaves_ledger_and_account_unchanged(self, db, user, workout, monkeypatch):
        monkeypatch.setattr(ProgressionAccountRepository, "apply_delta", _failing_apply_delta)

        with pytest.raises(InternalStorageError):
            CompletionService(db).create(user.id, workout.id, _performed(_sets(3)))

        assert CompletionService(db).list_history(user.id) == []
        assert _totals(_account(db, user.id)) == (0, 1, 0, 0, 0.0)

    def test_update_leaves_ledger_and_account_unchanged(self, db, user, workout, monkeypatch):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        before = _totals(_account(db, user.id))
        monkeypatch.setattr(ProgressionAccountRepository, "apply_delta", _failing_apply_delta)

        with pytest.raises(InternalStorageError):
            service.update(user.id, workout.id, created.completion.id,
                           CompletionUpdate.model_validate({"exercises": [
                               {"name": "Bench press", "sets": _sets(5)}]}))

        stored = service.get(user.id, workout.id, created.completion.id)
        assert len(stored.exercises[0].sets) == 3
        assert _totals(_account(db, user.id)) == before

    def test_delete_leaves_ledger_and_account_unchanged(self, db, user, workout, monkeypatch):
        service = CompletionService(db)
        created = service.create(user.id, workout.id, _performed(_sets(3)))
        before = _totals(_account(db, user.id))
        monkeypatch.setattr(ProgressionAccountRepository, "apply_delta", _failing_apply_delta)

        with pytest.raises(InternalStorageError):
            service.delete(user.id, workout.id, created.completion.id)

        assert [c.id for c in service.list_history(user.id)] == [created.completion.id]
        assert _totals(_account(db, user.id)) == before


def test_validate_content_reports_field_errors():
    with pytest.raises(ContentValidationError) as exc_info:
        validate_content({"actual_duration": -5})
    assert exc_info.value.status_code == 422
    assert len(exc_info.value.errors) == 1
    assert exc_info.value.errors[0]["msg"]


def test_validate_content_rejects_oversized_duration():
    with pytest.raises(ContentValidationError):
        validate_content({"actual_duration": 2**63})
