"""
Progression endpoints: account snapshot and ledger reconciliation.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from repforge.api.dependencies import get_current_user
from repforge.db.session import get_db
from repforge.models.user import User
from repforge.schemas.progression import DriftReport, ProgressionSnapshot
from repforge.services.progression_service import ProgressionService

router = APIRouter()


@router.get(
    "/me",
    summary="Get my xp, level and training statistics.",
    response_model=ProgressionSnapshot,
)
def get_my_progression(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return ProgressionService(db).get_snapshot(user.id)


@router.get(
    "/me/drift",
    summary="Compare my account with a full replay of my completions.",
    response_model=DriftReport,
)
def check_my_drift(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return ProgressionService(db).check(user.id)


@router.post(
    "/me/reconcile",
    summary="Rebuild my account from my completions if it has drifted.",
    response_model=DriftReport,
)
def reconcile_my_account(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return ProgressionService(db).reconcile(user.id)
