"""
Completion history endpoint.

Every completion of the acting user across all sessions, including
sessions that were deleted since (calendar and history views).
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from repforge.api.dependencies import get_current_user
from repforge.db.session import get_db
from repforge.models.user import User
from repforge.schemas.completion import CompletionResponse
from repforge.services.completion_service import CompletionService

router = APIRouter()


@router.get("", summary="My completion history, newest first.", response_model=list[CompletionResponse], )
def list_history(db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    return CompletionService(db).list_history(user.id)
