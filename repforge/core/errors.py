"""
Domain error taxonomy.

Services raise these; ``repforge.main`` maps them to HTTP responses.
``detail`` is what the client sees, so it never carries ownership or
storage internals.
"""

from typing import Any, Optional


class RepForgeError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_detail: str = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(RepForgeError):
    """Session, completion or account is absent, or not owned by the requester."""

    status_code = 404
    default_detail = "Not found"


class AlreadyExistsError(RepForgeError):
    status_code = 400
    default_detail = "Already exists"


class ContentValidationError(RepForgeError):
    """Completion content is malformed.  Raised before any mutation."""

    status_code = 422
    default_detail = "Invalid completion content"

    def __init__(self, detail: Optional[str] = None, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(detail)
        self.errors = errors or []


class InternalStorageError(RepForgeError):
    """The store was unreachable or a write failed.  The cause is logged, not exposed."""

    status_code = 500
    default_detail = "Storage error, please retry later"
