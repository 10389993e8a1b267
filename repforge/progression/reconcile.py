"""
Ledger reconciliation: detect and repair account drift.

The account is a cache of the ledger: replaying every completion of a
user must reproduce it exactly::

    xp                       = Σ delta(record).xp
    total_weight_lifted      = Σ delta(record).weight
    total_workout_time       = Σ delta(record).duration
    total_sessions_completed = number of records
    level                    = level_for_xp(xp)

Completions of soft-deleted sessions are part of the replay.  Drift can
only come from data written outside the ledger protocol (legacy rows,
manual edits, an old read-modify-write client); the transactional
protocol in :mod:`repforge.services.completion_service` does not
produce it.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlmodel import Session

from repforge.db.repositories.completion import CompletionRepository
from repforge.db.repositories.progression_account import ProgressionAccountRepository
from repforge.models.completion import CompletionRecord
from repforge.models.progression_account import ProgressionAccount
from repforge.progression.deltas import ZERO_DELTA, compute_delta
from repforge.progression.leveling import level_for_xp
from repforge.schemas.progression import DriftReport, LedgerTotals

# Float sums of weight may differ in the last bits depending on order.
WEIGHT_TOLERANCE = 1e-6


def record_content(record: CompletionRecord) -> dict:
    return { "actual_duration": record.actual_duration, "notes": record.notes, "exercises": record.exercises }


def replay_ledger(records: Iterable[CompletionRecord]) -> LedgerTotals:
    """Sum the deltas of *records* into the aggregates they imply."""
    total = ZERO_DELTA
    count = 0
    for record in records:
        total = total + compute_delta(record_content(record))
        count += 1
    return LedgerTotals(xp=total.xp, total_weight_lifted=total.weight, total_workout_time=total.duration,
                        total_sessions_completed=count, level=level_for_xp(total.xp), )


def account_totals(account: ProgressionAccount) -> LedgerTotals:
    return LedgerTotals(xp=account.xp, total_weight_lifted=account.total_weight_lifted,
                        total_workout_time=account.total_workout_time,
                        total_sessions_completed=account.total_sessions_completed, level=account.level, )


def detect_drift(user_id: int, account: ProgressionAccount, expected: LedgerTotals) -> DriftReport:
    """Compare stored aggregates with a ledger replay."""
    actual = account_totals(account)
    xp_drift = actual.xp - expected.xp
    weight_drift = actual.total_weight_lifted - expected.total_weight_lifted
    if abs(weight_drift) <= WEIGHT_TOLERANCE:
        weight_drift = 0.0
    duration_drift = actual.total_workout_time - expected.total_workout_time
    sessions_drift = actual.total_sessions_completed - expected.total_sessions_completed
    level_mismatch = actual.level != level_for_xp(actual.xp) or actual.level != expected.level

    has_drift = bool(xp_drift or weight_drift or duration_drift or sessions_drift or level_mismatch)
    return DriftReport(user_id=user_id, expected=expected, actual=actual, xp_drift=xp_drift,
                       weight_drift=round(weight_drift, 6), duration_drift=duration_drift,
                       sessions_drift=sessions_drift, level_mismatch=level_mismatch, has_drift=has_drift,
                       account_version=account.version, )


def compute_drift(session: Session, user_id: int, lock: bool = False) -> tuple[Optional[ProgressionAccount], Optional[DriftReport]]:
    """Replay the user's ledger and compare it with the stored account.

    Args:
        session: Database session.
        user_id: User ID.
        lock: Lock the account row first (needed before a repair).

    Returns:
        ``(account, report)``; ``account`` is ``None`` when the user has
        no account.
    """
    accounts = ProgressionAccountRepository(session)
    account = accounts.get_for_update(user_id) if lock else accounts.get_by_user(user_id)
    if account is None:
        return None, None

    expected = replay_ledger(CompletionRepository(session).list_by_user(user_id))
    return account, detect_drift(user_id, account, expected)
