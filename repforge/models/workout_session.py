"""
Workout session database model.

A session is the reusable plan (exercises with their planned sets).
Its ledger of completions lives in the ``completions`` table and is
never truncated, not even when the session is soft-deleted.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class WorkoutSession(SQLModel, table=True):
    """A workout session template owned by its creator."""

    __tablename__ = "workout_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    creator_id: int = Field(foreign_key="users.id", nullable=False, index=True)

    name: str = Field(nullable=False, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)

    # Planned exercises: [{name, category, muscle_groups, order, sets: [...]}]
    exercises: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )

    estimated_duration: int = Field(default=60, nullable=False)
    difficulty: str = Field(default="medium", max_length=20, nullable=False)
    category: str = Field(default="Mixte", max_length=50, nullable=False, index=True)
    tags: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )

    is_public: bool = Field(default=False, nullable=False, index=True)
    is_template: bool = Field(default=False, nullable=False)

    # Soft delete: hides the session, keeps its ledger
    is_deleted: bool = Field(default=False, nullable=False, index=True)
    deleted_at: Optional[datetime.datetime] = Field(default=None)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
