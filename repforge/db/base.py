"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from repforge.models.user import User  # noqa: F401
from repforge.models.workout_session import WorkoutSession  # noqa: F401
from repforge.models.completion import CompletionRecord  # noqa: F401
from repforge.models.progression_account import ProgressionAccount  # noqa: F401
