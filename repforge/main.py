"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from repforge.api.v1.router import api_router
from repforge.core.config import settings
from repforge.core.errors import ContentValidationError, RepForgeError
from repforge.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Workout completion ledger and training progression.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(RepForgeError)
async def repforge_error_handler(request: Request, exc: RepForgeError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.__cause__)
    content = { "detail": exc.detail }
    if isinstance(exc, ContentValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Rejected inputs are left out, they can be inf or nan.
    errors = [{ "loc": list(err["loc"]), "msg": err["msg"], "type": err["type"] } for err in exc.errors()]
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={ "detail": errors })


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "message": "RepForge API",
        "version": settings.VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "repforge-api",
        "version": settings.VERSION
    }
