"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from repforge.api.v1.endpoints import completions, progression, sessions, users

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    users.router, prefix="/users", tags=["Users"]
)
api_router.include_router(
    sessions.router, prefix="/sessions", tags=["Workout sessions"]
)
api_router.include_router(
    completions.router, prefix="/completions", tags=["Completion history"]
)
api_router.include_router(
    progression.router, prefix="/progression", tags=["Progression"]
)
