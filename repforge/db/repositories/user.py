"""
User repository.

Emails are stored lower-cased and looked up case-insensitively, so
``Athlete@Example.com`` and ``athlete@example.com`` are one account.
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from repforge.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, user: User) -> User:
        """Stage *user* and flush it so its id is known inside the caller's transaction."""
        user.email = normalize_email(user.email)
        self.session.add(user)
        self.session.flush()
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(func.lower(User.email) == normalize_email(email))
        return self.session.exec(statement).first()

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None
