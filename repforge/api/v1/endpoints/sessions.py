"""
Workout session endpoints.

Session plans plus their completion ledger: finishing a session,
correcting or deleting a recorded completion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from sqlmodel import Session

from repforge.api.dependencies import get_current_user
from repforge.db.session import get_db
from repforge.models.user import User
from repforge.schemas.completion import CompletionCreate, CompletionResponse, CompletionUpdate
from repforge.schemas.progression import (CompletionCreateResponse, CompletionDeleteResponse,
                                          CompletionUpdateResponse, )
from repforge.schemas.workout_session import (Difficulty, PublicSessionPage, SessionCategory, WorkoutSessionCreate,
                                              WorkoutSessionResponse, WorkoutSessionUpdate, )
from repforge.services.completion_service import CompletionService
from repforge.services.workout_session_service import WorkoutSessionService

router = APIRouter()


@router.post("", summary="Create a workout session.", response_model=WorkoutSessionResponse,
             status_code=status.HTTP_201_CREATED, )
def create_session(data: WorkoutSessionCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).create(user.id, data)


@router.get("", summary="List my active sessions.", response_model=list[WorkoutSessionResponse], )
def list_sessions(is_template: Optional[bool] = Query(None), category: Optional[SessionCategory] = Query(None),
                  difficulty: Optional[Difficulty] = Query(None), db: Session = Depends(get_db),
                  user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).list_own(user.id, is_template, category, difficulty)


@router.get("/public", summary="Browse public sessions of other users.", response_model=PublicSessionPage, )
def list_public_sessions(category: Optional[SessionCategory] = Query(None),
                         difficulty: Optional[Difficulty] = Query(None), page: int = Query(1, ge=1),
                         limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db),
                         user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).list_public(user.id, category, difficulty, page, limit)


@router.get("/{session_id}", summary="Get a session.", response_model=WorkoutSessionResponse, )
def get_session(session_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).get(user.id, session_id)


@router.put("/{session_id}", summary="Update a session.", response_model=WorkoutSessionResponse, )
def update_session(session_id: int, data: WorkoutSessionUpdate, db: Session = Depends(get_db),
                   user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).update(user.id, session_id, data)


@router.delete("/{session_id}", summary="Soft-delete a session (its history is kept).")
def delete_session(session_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    kept = WorkoutSessionService(db).soft_delete(user.id, session_id)
    return { "message": "Session deleted", "completions_kept": kept }


@router.post("/{session_id}/copy", summary="Duplicate a session with an empty history.",
             response_model=WorkoutSessionResponse, status_code=status.HTTP_201_CREATED, )
def copy_session(session_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    return WorkoutSessionService(db).duplicate(user.id, session_id)


# ----------------------------------------------------------------------
# Completion ledger
# ----------------------------------------------------------------------


@router.post("/{session_id}/complete", summary="Finish a session and record the performance.",
             response_model=CompletionCreateResponse, )
def complete_session(session_id: int, data: CompletionCreate,
                     idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=128),
                     db: Session = Depends(get_db), user: User = Depends(get_current_user), ):
    """Record a performance of one of my sessions or of a public session of another user.

    The session must not be soft-deleted.  A private session of another
    user answers 404.
    """
    return CompletionService(db).create(user.id, session_id, data, idempotency_key=idempotency_key)


@router.get("/{session_id}/completions", summary="My completions of a session.",
            response_model=list[CompletionResponse], )
def list_session_completions(session_id: int, db: Session = Depends(get_db),
                             user: User = Depends(get_current_user), ):
    return CompletionService(db).list_for_session(user.id, session_id)


@router.get("/{session_id}/completions/{completion_id}", summary="Get a recorded completion.",
            response_model=CompletionResponse, )
def get_completion(session_id: int, completion_id: int, db: Session = Depends(get_db),
                   user: User = Depends(get_current_user), ):
    return CompletionService(db).get(user.id, session_id, completion_id)


@router.put("/{session_id}/completions/{completion_id}", summary="Correct a recorded completion.",
            response_model=CompletionUpdateResponse, )
def update_completion(session_id: int, completion_id: int, data: CompletionUpdate, db: Session = Depends(get_db),
                      user: User = Depends(get_current_user), ):
    return CompletionService(db).update(user.id, session_id, completion_id, data)


@router.delete("/{session_id}/completions/{completion_id}", summary="Delete a recorded completion.",
               response_model=CompletionDeleteResponse, )
def delete_completion(session_id: int, completion_id: int, db: Session = Depends(get_db),
                      user: User = Depends(get_current_user), ):
    return CompletionService(db).delete(user.id, session_id, completion_id)
