"""
Progression service.

Account snapshots and ledger reconciliation.
"""

import logging

from sqlmodel import Session

from repforge.core.errors import NotFoundError
from repforge.db.repositories.progression_account import ProgressionAccountRepository
from repforge.db.session import storage_errors, transaction
from repforge.models.progression_account import ProgressionAccount
from repforge.progression.leveling import level_progress
from repforge.progression.reconcile import compute_drift
from repforge.schemas.progression import DriftReport, ProgressionSnapshot, ProgressionStats

logger = logging.getLogger(__name__)


def to_snapshot(account: ProgressionAccount) -> ProgressionSnapshot:
    progress = level_progress(account.xp)
    return ProgressionSnapshot(xp=account.xp, level=account.level,
                               total_sessions_completed=account.total_sessions_completed,
                               stats=ProgressionStats(total_workout_time=account.total_workout_time,
                                                      total_weight_lifted=account.total_weight_lifted, ),
                               xp_into_level=progress.xp_into_level, xp_for_next_level=progress.xp_for_next_level, )


class ProgressionService:
    """Service for reading and repairing progression accounts."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = ProgressionAccountRepository(session)

    def get_snapshot(self, user_id: int) -> ProgressionSnapshot:
        with storage_errors(self.session, "progression.snapshot"):
            account = self.repository.get_by_user(user_id)
        if account is None:
            raise NotFoundError("Progression account not found")
        return to_snapshot(account)

    def check(self, user_id: int) -> DriftReport:
        """Replay the ledger and report drift without changing anything."""
        with storage_errors(self.session, "progression.check"):
            account, report = compute_drift(self.session, user_id)
        if account is None:
            raise NotFoundError("Progression account not found")
        if report.has_drift:
            logger.warning("Drift detected for user %s: xp=%+d weight=%+.3f duration=%+d sessions=%+d", user_id,
                           report.xp_drift, report.weight_drift, report.duration_drift, report.sessions_drift)
        return report

    def reconcile(self, user_id: int) -> DriftReport:
        """Rewrite the account from a full ledger replay when it has drifted.

        Returns the report observed *before* the repair, with
        ``repaired`` set when the account was rewritten.
        """
        with transaction(self.session, "progression.reconcile"):
            account, report = compute_drift(self.session, user_id, lock=True)
            if account is None:
                raise NotFoundError("Progression account not found")
            if not report.has_drift:
                return report

            expected = report.expected
            account = self.repository.overwrite(user_id, xp=expected.xp,
                                                total_weight_lifted=expected.total_weight_lifted,
                                                total_workout_time=expected.total_workout_time,
                                                total_sessions_completed=expected.total_sessions_completed, )

        logger.warning("Account of user %s rebuilt from ledger: xp %d -> %d, sessions %d -> %d", user_id,
                       report.actual.xp, account.xp, report.actual.total_sessions_completed,
                       account.total_sessions_completed)
        return report.model_copy(update={ "repaired": True, "account_version": account.version })
