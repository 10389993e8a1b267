"""
Workout session API schemas.

A session is the plan; what was actually performed is recorded in the
completion ledger (:mod:`repforge.schemas.completion`).
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from repforge.schemas.completion import (EXERCISE_CATEGORIES, MAX_DISTANCE_M, MAX_EXERCISES, MAX_REPS,
                                         MAX_SESSION_MINUTES, MAX_SET_SECONDS, MAX_SETS_PER_EXERCISE,
                                         MAX_WEIGHT_KG, )

Difficulty = Literal["easy", "medium", "hard"]
SessionCategory = Literal["Force", "Cardio", "Flexibilité", "Mixte"]
ExerciseCategory = Literal[EXERCISE_CATEGORIES]


class PlannedSet(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    reps: int = Field(..., ge=1, le=MAX_REPS)
    weight: float = Field(0.0, ge=0.0, le=MAX_WEIGHT_KG, description="kg")
    duration: int = Field(0, ge=0, le=MAX_SET_SECONDS, description="Seconds, for timed exercises")
    distance: float = Field(0.0, ge=0.0, le=MAX_DISTANCE_M, description="Meters")
    rest_time: int = Field(60, ge=0, le=MAX_SET_SECONDS, description="Seconds")
    notes: str = ""


class PlannedExercise(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: ExerciseCategory = "Force"
    muscle_groups: list[str] = Field(default_factory=list)
    sets: list[PlannedSet] = Field(..., min_length=1, max_length=MAX_SETS_PER_EXERCISE)
    order: Optional[int] = Field(None, ge=0)


class WorkoutSessionCreate(BaseModel):
    """Schema for creating a workout session."""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    difficulty: Difficulty = "medium"
    category: SessionCategory = "Mixte"
    estimated_duration: Optional[int] = Field(
        None, ge=1, le=MAX_SESSION_MINUTES, description="Minutes; derived from the planned sets when omitted",
    )
    exercises: list[PlannedExercise] = Field(..., min_length=1, max_length=MAX_EXERCISES)
    tags: list[str] = Field(default_factory=list)
    is_public: bool = False
    is_template: bool = False


class WorkoutSessionUpdate(BaseModel):
    """Schema for updating a workout session."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    difficulty: Optional[Difficulty] = None
    category: Optional[SessionCategory] = None
    estimated_duration: Optional[int] = Field(None, ge=1, le=MAX_SESSION_MINUTES)
    exercises: Optional[list[PlannedExercise]] = Field(None, min_length=1, max_length=MAX_EXERCISES)
    tags: Optional[list[str]] = None
    is_public: Optional[bool] = None


class WorkoutSessionResponse(BaseModel):
    """Schema for a workout session in API responses."""

    id: int
    creator_id: int
    name: str
    description: Optional[str]
    difficulty: str
    category: str
    estimated_duration: int
    exercises: list[PlannedExercise]
    tags: list[str]
    is_public: bool
    is_template: bool
    completions_count: int
    is_owner: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_sessions: int
    has_next: bool
    has_prev: bool


class PublicSessionPage(BaseModel):
    sessions: list[WorkoutSessionResponse]
    pagination: Pagination
