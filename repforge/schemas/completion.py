"""
Completion API schemas.

:class:`CompletionContent` is the validated value object every delta
computation runs on.  Payloads are rejected here, before any stored
state is touched.  Input models accept both ``snake_case`` and the
``camelCase`` names used by the mobile client.
"""

import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Canonical exercise categories.
EXERCISE_CATEGORIES: tuple[str, ...] = (
    "Haut du corps",
    "Bas du corps",
    "Pectoraux",
    "Dos",
    "Triceps",
    "Biceps",
    "Épaules",
    "Abdominaux",
    "Cardio",
    "Force",
    "Flexibilité",
    "Mixte",
)

_CATEGORY_LOOKUP: dict[str, str] = {c.lower(): c for c in EXERCISE_CATEGORIES}
_CATEGORY_LOOKUP["strength"] = "Force"

DEFAULT_EXERCISE_CATEGORY = "Force"

# Upper bounds of a single performance; larger values are input errors.
MAX_SESSION_MINUTES = 1440
MAX_REPS = 10_000
MAX_SET_SECONDS = 86_400
MAX_WEIGHT_KG = 2_000.0
MAX_DISTANCE_M = 1_000_000.0
MAX_EXERCISES = 100
MAX_SETS_PER_EXERCISE = 100


def normalize_category(value: Optional[str]) -> str:
    """Map a free-form category onto :data:`EXERCISE_CATEGORIES`.

    Matching is case-insensitive; unknown values fall back to ``Force``.
    """
    if not value:
        return DEFAULT_EXERCISE_CATEGORY
    return _CATEGORY_LOOKUP.get(value.strip().lower(), DEFAULT_EXERCISE_CATEGORY)


class CompletionSet(BaseModel):
    """One performed set.  Missing or null values count as zero / not completed."""

    model_config = ConfigDict(allow_inf_nan=False)

    reps: int = Field(0, ge=0, le=MAX_REPS)
    weight: float = Field(0.0, ge=0.0, le=MAX_WEIGHT_KG, description="Weight in kg")
    duration: int = Field(0, ge=0, le=MAX_SET_SECONDS, description="Seconds")
    distance: float = Field(0.0, ge=0.0, le=MAX_DISTANCE_M, description="Meters")
    completed: bool = False

    @field_validator("reps", "weight", "duration", "distance", "completed", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class CompletionExercise(BaseModel):
    """An exercise as performed, with its sets."""

    name: str = Field(..., min_length=1, max_length=200)
    category: str = "Mixte"
    sets: list[CompletionSet] = Field(default_factory=list, max_length=MAX_SETS_PER_EXERCISE)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_category(value)
        return value

    @field_validator("sets", mode="before")
    @classmethod
    def _null_sets(cls, value: Any) -> Any:
        return [] if value is None else value


class CompletionContent(BaseModel):
    """Everything about one performance that contributes to the aggregates."""

    model_config = ConfigDict(populate_by_name=True)

    actual_duration: int = Field(
        0, ge=0, le=MAX_SESSION_MINUTES, validation_alias=AliasChoices("actual_duration", "actualDuration"),
        description="Minutes",
    )
    notes: str = Field("", max_length=2000)
    exercises: list[CompletionExercise] = Field(default_factory=list, max_length=MAX_EXERCISES)

    @field_validator("actual_duration", mode="before")
    @classmethod
    def _null_duration(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    def to_storage(self) -> dict[str, Any]:
        """Return the columns of a :class:`~repforge.models.completion.CompletionRecord`."""
        return {
            "actual_duration": self.actual_duration,
            "notes": self.notes,
            "exercises": [e.model_dump() for e in self.exercises],
        }


class CompletionCreate(BaseModel):
    """Request body for finishing a session.

    Omitted ``exercises`` are taken from the session plan with every set
    marked not completed; omitted ``actual_duration`` falls back to the
    session's estimated duration.
    """

    model_config = ConfigDict(populate_by_name=True)

    actual_duration: Optional[int] = Field(
        None, ge=0, le=MAX_SESSION_MINUTES, validation_alias=AliasChoices("actual_duration", "actualDuration"),
    )
    notes: Optional[str] = Field(None, max_length=2000)
    exercises: Optional[list[CompletionExercise]] = Field(None, max_length=MAX_EXERCISES)
    idempotency_key: Optional[str] = Field(
        None, min_length=1, max_length=128, validation_alias=AliasChoices("idempotency_key", "idempotencyKey"),
    )


class CompletionUpdate(BaseModel):
    """Partial correction of a recorded completion."""

    model_config = ConfigDict(populate_by_name=True)

    actual_duration: Optional[int] = Field(
        None, ge=0, le=MAX_SESSION_MINUTES, validation_alias=AliasChoices("actual_duration", "actualDuration"),
    )
    notes: Optional[str] = Field(None, max_length=2000)
    exercises: Optional[list[CompletionExercise]] = Field(None, max_length=MAX_EXERCISES)


class CompletionResponse(BaseModel):
    """A ledger entry as returned by the API."""

    id: int
    user_id: int
    session_id: int
    session_name: Optional[str] = None
    session_is_deleted: bool = False
    completed_at: datetime.datetime
    actual_duration: int
    notes: str
    exercises: list[CompletionExercise]
    xp_gained: int
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
