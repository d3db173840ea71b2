"""User context for API requests.

This module resolves the logged-in user from the session cookie and, when
AUTH_REQUIRED is enabled, rejects API requests that carry no valid session.
"""

import os
from typing import Optional

from fastapi import Cookie, HTTPException

from server.auth import COOKIE_NAME, get_session_from_cookie


def auth_required() -> bool:
    return os.getenv("AUTH_REQUIRED", "false").strip().lower() in ("1", "true", "yes", "on")


def get_current_user(
    session: Optional[str] = Cookie(None, alias=COOKIE_NAME),
) -> Optional[dict]:
    """Get the current user from the session cookie.

    Returns:
        User dictionary, or None when there is no valid session.
    """
    session_data = get_session_from_cookie(session)
    return session_data["user"] if session_data else None


def require_user(
    session: Optional[str] = Cookie(None, alias=COOKIE_NAME),
) -> Optional[dict]:
    """Dependency guarding the API routers.

    Raises:
        HTTPException: 401 when AUTH_REQUIRED is on and nobody is logged in.
    """
    user = get_current_user(session)
    if user is None and auth_required():
        raise HTTPException(401, "Authentication required")
    return user
