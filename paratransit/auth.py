"""Session dependency for the client-scoped API endpoints.

The backend session cookie is obtained elsewhere (browser login) and sent
to us as ``Authorization: Bearer <cookie>``.  This service never validates
or stores it; it is only forwarded to the backend, which decides.

  Bearer token present → the token is handed to the route
  Missing or empty     → 401 Unauthorized
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

log = logging.getLogger("paratransit.auth")

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """FastAPI dependency: return the caller's backend session token."""
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing session token. Log in and send it as a Bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials.strip()
