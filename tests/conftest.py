"""Shared fixtures.

The settings are read at import time, so the test database URL and the
token secret are set before anything from ``repforge`` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import repforge.db.base  # noqa: F401
from repforge.core.security import create_access_token
from repforge.db.session import get_db
from repforge.schemas.user import UserCreate
from repforge.schemas.workout_session import WorkoutSessionCreate
from repforge.services.user_service import UserService
from repforge.services.workout_session_service import WorkoutSessionService


# ======================================================================
# Database
# ======================================================================


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


# ======================================================================
# Domain objects
# ======================================================================


@pytest.fixture
def user(db):
    return UserService(db).register(UserCreate(email="athlete@example.com", full_name="Test Athlete"))


@pytest.fixture
def other_user(db):
    return UserService(db).register(UserCreate(email="rival@example.com", full_name="Other Athlete"))


def _plan(**overrides) -> WorkoutSessionCreate:
    """Bench press 3×10 @ 50kg and pull-ups 2×8, estimated at 8 minutes."""
    data = {
        "name": "Upper body",
        "category": "Force",
        "difficulty": "medium",
        "exercises": [
            {
                "name": "Bench press",
                "category": "Pectoraux",
                "sets": [{"reps": 10, "weight": 50.0}] * 3,
            },
            {
                "name": "Pull-up",
                "category": "Dos",
                "sets": [{"reps": 8}] * 2,
            },
        ],
    }
    data.update(overrides)
    return WorkoutSessionCreate.model_validate(data)


@pytest.fixture
def make_plan():
    return _plan


@pytest.fixture
def workout(db, user):
    return WorkoutSessionService(db).create(user.id, _plan())


# ======================================================================
# API
# ======================================================================


@pytest.fixture
def client(db):
    from repforge.main import app

    def get_db_override():
        yield db

    app.dependency_overrides[get_db] = get_db_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
