"""Pydantic schemas for request/response validation."""

from repforge.schemas.user import UserCreate, UserResponse
from repforge.schemas.completion import (
    CompletionContent,
    CompletionCreate,
    CompletionExercise,
    CompletionResponse,
    CompletionSet,
    CompletionUpdate,
)
from repforge.schemas.progression import (
    CompletionCreateResponse,
    CompletionDeleteResponse,
    CompletionUpdateResponse,
    CreateReport,
    DeleteReport,
    DriftReport,
    LedgerTotals,
    ProgressionSnapshot,
    ProgressionStats,
    UpdateReport,
)
from repforge.schemas.workout_session import (
    PlannedExercise,
    PlannedSet,
    PublicSessionPage,
    WorkoutSessionCreate,
    WorkoutSessionResponse,
    WorkoutSessionUpdate,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "CompletionContent",
    "CompletionCreate",
    "CompletionExercise",
    "CompletionResponse",
    "CompletionSet",
    "CompletionUpdate",
    "CompletionCreateResponse",
    "CompletionDeleteResponse",
    "CompletionUpdateResponse",
    "CreateReport",
    "DeleteReport",
    "DriftReport",
    "LedgerTotals",
    "ProgressionSnapshot",
    "ProgressionStats",
    "UpdateReport",
    "PlannedExercise",
    "PlannedSet",
    "PublicSessionPage",
    "WorkoutSessionCreate",
    "WorkoutSessionResponse",
    "WorkoutSessionUpdate",
]
