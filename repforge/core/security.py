"""
Token verification.

Access tokens are issued by the external auth service and signed with the
shared ``SECRET_KEY``.  The ``sub`` claim carries the user id.
"""

import datetime
import logging
from typing import Optional

import jwt
from fastapi.security import HTTPBearer

from repforge.core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> Optional[int]:
    """Return the user id carried by *token*, or ``None`` if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Rejected access token: %s", e)
        return None

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def create_access_token(user_id: int, expires_delta: Optional[datetime.timedelta] = None) -> str:
    """Sign a token for *user_id*.  Used by tests and local tooling."""
    expire = datetime.datetime.now(datetime.timezone.utc) + (expires_delta or datetime.timedelta(minutes=60))
    return jwt.encode({ "sub": str(user_id), "exp": expire }, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
