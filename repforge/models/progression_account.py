"""
Progression account database model.

One row per user, created at registration.  Aggregates are only ever
changed through :class:`~repforge.db.repositories.progression_account.ProgressionAccountRepository`,
which applies deltas as atomic SQL increments.
"""

import datetime

from sqlmodel import Field, SQLModel


class ProgressionAccount(SQLModel, table=True):
    """Per-user aggregate of all completion deltas."""

    __tablename__ = "progression_accounts"

    user_id: int = Field(foreign_key="users.id", primary_key=True)

    xp: int = Field(default=0, nullable=False)
    level: int = Field(default=1, nullable=False)
    total_sessions_completed: int = Field(default=0, nullable=False)
    total_workout_time: int = Field(default=0, nullable=False)  # minutes
    total_weight_lifted: float = Field(default=0.0, nullable=False)  # kg

    # Bumped on every mutation
    version: int = Field(default=1, nullable=False)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
