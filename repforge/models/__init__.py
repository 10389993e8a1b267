"""SQLModel database models."""

from repforge.models.user import User
from repforge.models.workout_session import WorkoutSession
from repforge.models.completion import CompletionRecord
from repforge.models.progression_account import ProgressionAccount

__all__ = [
    "User",
    "WorkoutSession",
    "CompletionRecord",
    "ProgressionAccount",
]
