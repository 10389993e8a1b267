"""
Progression API schemas.

Account snapshot, per-operation reports and the drift report produced
by ledger reconciliation.
"""

from typing import Optional

from pydantic import BaseModel, Field

from repforge.schemas.completion import CompletionResponse


class ProgressionStats(BaseModel):
    total_workout_time: int = Field(..., ge=0, description="Minutes")
    total_weight_lifted: float = Field(..., ge=0.0, description="kg")


class ProgressionSnapshot(BaseModel):
    """The account as exposed to clients."""

    xp: int = Field(..., ge=0)
    level: int = Field(..., ge=1)
    total_sessions_completed: int = Field(..., ge=0)
    stats: ProgressionStats
    xp_into_level: int = Field(..., ge=0, description="XP earned since the current level started")
    xp_for_next_level: int = Field(..., ge=0, description="XP still missing for the next level")


# ----------------------------------------------------------------------
# Operation reports
# ----------------------------------------------------------------------


class CreateReport(BaseModel):
    xp_gained: int
    weight_gained: float
    duration_applied: int
    level_up: bool
    levels_gained: int
    old_level: int
    new_level: int


class UpdateReport(BaseModel):
    xp_diff: int
    weight_diff: float
    duration_diff: int


class DeleteReport(BaseModel):
    xp_removed: int
    weight_removed: float
    duration_removed: int


class CompletionCreateResponse(BaseModel):
    completion: CompletionResponse
    report: CreateReport
    account: ProgressionSnapshot
    replayed: bool = Field(False, description="True when the idempotency key was already used; nothing was applied")


class CompletionUpdateResponse(BaseModel):
    completion: CompletionResponse
    report: UpdateReport
    account: ProgressionSnapshot


class CompletionDeleteResponse(BaseModel):
    report: DeleteReport
    account: ProgressionSnapshot


# ----------------------------------------------------------------------
# Reconciliation
# ----------------------------------------------------------------------


class LedgerTotals(BaseModel):
    """Aggregates re-derived from a full ledger replay."""

    xp: int = 0
    total_weight_lifted: float = 0.0
    total_workout_time: int = 0
    total_sessions_completed: int = 0
    level: int = 1


class DriftReport(BaseModel):
    """Difference between stored aggregates and the ledger replay.

    Drift values are ``stored - expected``; positive means the account
    over-counts.
    """

    user_id: int
    expected: LedgerTotals
    actual: LedgerTotals
    xp_drift: int
    weight_drift: float
    duration_drift: int
    sessions_drift: int
    level_mismatch: bool
    has_drift: bool
    repaired: bool = False
    account_version: Optional[int] = None
