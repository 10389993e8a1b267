"""
Progression account repository.

Aggregates are never written back from a value computed in application
memory.  :meth:`ProgressionAccountRepository.apply_delta` issues a single
``UPDATE ... SET xp = xp + :delta`` so concurrent operations on the same
account cannot overwrite each other's contribution.  Decrements are
clamped at zero inside the same statement, and the weight total is rounded
to WEIGHT_DECIMALS places there as well.
"""

import datetime
from typing import Optional

from sqlalchemy import Numeric, case, cast, func, update
from sqlmodel import Session, select

from repforge.models.progression_account import ProgressionAccount
from repforge.progression.deltas import WEIGHT_DECIMALS, CompletionDelta, round_weight
from repforge.progression.leveling import level_for_xp


def _clamped_add(column, amount, zero):
    return case((column + amount < zero, zero), else_=column + amount)


def _rounded_weight(expression):
    return func.round(cast(expression, Numeric), WEIGHT_DECIMALS)


class ProgressionAccountRepository:
    """Repository for ProgressionAccount database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, account: ProgressionAccount) -> ProgressionAccount:
        self.session.add(account)
        self.session.flush()
        return account

    def get_by_user(self, user_id: int) -> Optional[ProgressionAccount]:
        statement = (select(ProgressionAccount).where(ProgressionAccount.user_id == user_id).execution_options(
            populate_existing=True))
        return self.session.exec(statement).first()

    def get_for_update(self, user_id: int) -> Optional[ProgressionAccount]:
        """Read the account and lock its row until the transaction ends.

        On PostgreSQL this is ``SELECT ... FOR UPDATE``; SQLite ignores the
        clause and serialises writers on the database lock instead.
        """
        statement = (select(ProgressionAccount).where(ProgressionAccount.user_id == user_id).with_for_update()
                     .execution_options(populate_existing=True))
        return self.session.exec(statement).first()

    def apply_delta(self, user_id: int, delta: CompletionDelta, sessions: int = 0, ) -> ProgressionAccount:
        """Atomically add *delta* (and *sessions*) to the account, then re-derive the level.

        Every aggregate is clamped at zero.  Returns the refreshed account.
        """
        statement = (update(ProgressionAccount).where(ProgressionAccount.user_id == user_id).values(
            xp=_clamped_add(ProgressionAccount.xp, delta.xp, 0),
            total_weight_lifted=_rounded_weight(
                _clamped_add(ProgressionAccount.total_weight_lifted, delta.weight, 0.0)),
            total_workout_time=_clamped_add(ProgressionAccount.total_workout_time, delta.duration, 0),
            total_sessions_completed=_clamped_add(ProgressionAccount.total_sessions_completed, sessions, 0),
            version=ProgressionAccount.version + 1, updated_at=datetime.datetime.utcnow(), ).execution_options(synchronize_session=False))
        self.session.exec(statement)
        return self._sync_level(user_id)

    def overwrite(self, user_id: int, xp: int, total_weight_lifted: float, total_workout_time: int,
                  total_sessions_completed: int, ) -> ProgressionAccount:
        """Replace the aggregates (used by ledger reconciliation)."""
        statement = (update(ProgressionAccount).where(ProgressionAccount.user_id == user_id).values(
            xp=xp, total_weight_lifted=round_weight(total_weight_lifted), total_workout_time=total_workout_time,
            total_sessions_completed=total_sessions_completed, version=ProgressionAccount.version + 1,
            updated_at=datetime.datetime.utcnow(), ).execution_options(synchronize_session=False))
        self.session.exec(statement)
        return self._sync_level(user_id)

    def _sync_level(self, user_id: int) -> ProgressionAccount:
        account = self.get_by_user(user_id)
        level = level_for_xp(account.xp)
        if account.level != level:
            self.session.exec(
                update(ProgressionAccount).where(ProgressionAccount.user_id == user_id).values(level=level).execution_options(
                    synchronize_session=False))
            account = self.get_by_user(user_id)
        return account
