"""
User endpoints.

Registration opens the user's progression account.  Credentials and
token issuance belong to the external auth service.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from repforge.api.dependencies import get_current_user
from repforge.db.session import get_db
from repforge.models.user import User
from repforge.schemas.user import UserCreate, UserResponse
from repforge.services.user_service import UserService

router = APIRouter()


@router.post("/register",
             summary="User registration endpoint.",
             response_model=UserResponse,
             status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user.

    Args:
        user_data: User registration data (email, full_name)
        db: Database session

    Returns:
        Created user data

    Raises:
        AlreadyExistsError: If email already registered (400)
    """
    return UserService(db).register(user_data)


@router.get("/me",
            summary="User info endpoint.",
            response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
