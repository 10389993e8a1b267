"""
Completion record database model.

One row per performance of a session.  The performed exercises are
stored as JSON (validated by :class:`~repforge.schemas.completion.CompletionContent`
at the service layer).  Deltas are *not* stored: they are recomputed from
the content whenever needed, which keeps a single source of truth.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class CompletionRecord(SQLModel, table=True):
    """A single entry of a session's ledger."""

    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_completion_user_idempotency_key", ),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    session_id: int = Field(foreign_key="workout_sessions.id", nullable=False, index=True)

    completed_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow, nullable=False, index=True)

    # Mutable content
    actual_duration: int = Field(default=0, nullable=False)
    notes: str = Field(default="", max_length=2000, nullable=False)
    exercises: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )

    # Client supplied key; a repeated key for the same user is a replay
    idempotency_key: Optional[str] = Field(default=None, max_length=128)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
