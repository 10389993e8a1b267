"""Database repositories."""

from repforge.db.repositories.user import UserRepository
from repforge.db.repositories.workout_session import WorkoutSessionRepository
from repforge.db.repositories.completion import CompletionRepository
from repforge.db.repositories.progression_account import ProgressionAccountRepository

__all__ = [
    "UserRepository",
    "WorkoutSessionRepository",
    "CompletionRepository",
    "ProgressionAccountRepository",
]
