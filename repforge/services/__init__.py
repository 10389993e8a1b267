"""Business logic services."""

from repforge.services.user_service import UserService
from repforge.services.workout_session_service import WorkoutSessionService
from repforge.services.completion_service import CompletionService
from repforge.services.progression_service import ProgressionService

__all__ = [
    "UserService",
    "WorkoutSessionService",
    "CompletionService",
    "ProgressionService",
]
