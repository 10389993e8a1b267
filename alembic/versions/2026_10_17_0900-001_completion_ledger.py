"""Completion ledger and progression accounts

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, workout_sessions, completions and progression_accounts."""
    op.create_table('users', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('full_name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('workout_sessions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=True),
        sa.Column('exercises', sa.JSON(), nullable=False),
        sa.Column('estimated_duration', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('difficulty', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False,
                  server_default='medium'),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False,
                  server_default='Mixte'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_template', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_workout_sessions_creator_id'), 'workout_sessions', ['creator_id'], unique=False)
    op.create_index(op.f('ix_workout_sessions_category'), 'workout_sessions', ['category'], unique=False)
    op.create_index(op.f('ix_workout_sessions_is_public'), 'workout_sessions', ['is_public'], unique=False)
    op.create_index(op.f('ix_workout_sessions_is_deleted'), 'workout_sessions', ['is_deleted'], unique=False)

    op.create_table('completions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.Column('actual_duration', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False, server_default=''),
        sa.Column('exercises', sa.JSON(), nullable=False),
        sa.Column('idempotency_key', sqlmodel.sql.sqltypes.AutoString(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'idempotency_key', name='uq_completion_user_idempotency_key'))
    op.create_index(op.f('ix_completions_user_id'), 'completions', ['user_id'], unique=False)
    op.create_index(op.f('ix_completions_session_id'), 'completions', ['session_id'], unique=False)
    op.create_index(op.f('ix_completions_completed_at'), 'completions', ['completed_at'], unique=False)

    op.create_table('progression_accounts', sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('xp', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_sessions_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_workout_time', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_weight_lifted', sa.Float(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('user_id'))


def downgrade() -> None:
    """Drop the ledger tables, dependents first."""
    op.drop_table('progression_accounts')
    op.drop_index(op.f('ix_completions_completed_at'), table_name='completions')
    op.drop_index(op.f('ix_completions_session_id'), table_name='completions')
    op.drop_index(op.f('ix_completions_user_id'), table_name='completions')
    op.drop_table('completions')
    op.drop_index(op.f('ix_workout_sessions_is_deleted'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_is_public'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_category'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_creator_id'), table_name='workout_sessions')
    op.drop_table('workout_sessions')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
