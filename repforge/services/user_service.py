"""
User service.

Registration creates the user and its progression account together.
"""

import logging
from typing import Optional

from sqlmodel import Session

from repforge.core.errors import AlreadyExistsError
from repforge.db.repositories.progression_account import ProgressionAccountRepository
from repforge.db.repositories.user import UserRepository
from repforge.db.session import transaction
from repforge.models.progression_account import ProgressionAccount
from repforge.models.user import User
from repforge.schemas.user import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """Service for user-related business logic."""

    def __init__(self, session: Session):
        """
        Initialize service with database session.

        Args:
            session: SQLModel database session
        """
        self.session = session
        self.repository = UserRepository(session)
        self.accounts = ProgressionAccountRepository(session)

    def register(self, user_data: UserCreate) -> User:
        """
        Register a new user with a fresh progression account.

        The account starts at xp 0, level 1 and zero statistics.

        Args:
            user_data: User registration data

        Returns:
            Created user

        Raises:
            AlreadyExistsError: If email already exists
        """
        if self.repository.exists_by_email(user_data.email):
            raise AlreadyExistsError("User already registered")

        with transaction(self.session, "user.register"):
            user = self.repository.add(User(email=user_data.email, full_name=user_data.full_name))
            self.accounts.add(ProgressionAccount(user_id=user.id))

        self.session.refresh(user)
        logger.info("Registered user %s with a new progression account", user.id)
        return user

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User if found, None otherwise
        """
        return self.repository.get_by_id(user_id)
