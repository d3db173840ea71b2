"""Session authentication module.

This module handles account registration, username/password login and
logout. Sessions are kept in memory and handed to the browser as a cookie
signed with itsdangerous.
"""

import hashlib
import hmac
import logging
import os
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException
from fastapi.responses import JSONResponse
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import User, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")

# Validate required environment variables
if not SESSION_SECRET_KEY:
    SESSION_SECRET_KEY = secrets.token_urlsafe(32)
    logger.warning(
        "SESSION_SECRET_KEY not set. Using temporary key. Set this in .env for production."
    )

# Session serializer for secure cookie signing
serializer = URLSafeTimedSerializer(SESSION_SECRET_KEY)

# Session configuration
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days in seconds
COOKIE_NAME = "session"

PASSWORD_ITERATIONS = 200_000
MIN_PASSWORD_LEN = 8
MAX_USERNAME_LEN = 64

# In-memory session storage
user_sessions: dict[str, dict] = {}


class Credentials(BaseModel):
    """Request model for registering and logging in."""

    username: str
    password: str


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Hash a password with PBKDF2-SHA256.

    Returns:
        ``"<salt>$<hex digest>"``.
    """
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PASSWORD_ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    salt, _, _ = stored_hash.partition("$")
    return hmac.compare_digest(hash_password(password, salt), stored_hash)


def prune_expired_sessions(now: Optional[datetime] = None) -> int:
    """Drop in-memory sessions older than SESSION_MAX_AGE.

    Returns:
        Number of sessions removed.
    """
    cutoff = (now or datetime.now()) - timedelta(seconds=SESSION_MAX_AGE)
    expired = [
        session_id
        for session_id, data in user_sessions.items()
        if datetime.fromisoformat(data["created_at"]) < cutoff
    ]
    for session_id in expired:
        del user_sessions[session_id]
    if expired:
        logger.info("Removed %d expired session(s)", len(expired))
    return len(expired)


def create_session(user_data: dict) -> str:
    """Create a secure session token for the user.

    Args:
        user_data: Dictionary containing user information (id, username).

    Returns:
        Signed session token string.
    """
    prune_expired_sessions()
    session_id = secrets.token_urlsafe(32)
    user_sessions[session_id] = {
        "user": user_data,
        "created_at": datetime.now().isoformat(),
    }
    return serializer.dumps(session_id)


def get_session_from_cookie(session_cookie: Optional[str]) -> Optional[dict]:
    """Validate and retrieve session data from signed cookie.

    Args:
        session_cookie: Signed session cookie value.

    Returns:
        User session data if valid, None otherwise.
    """
    if not session_cookie:
        return None

    try:
        session_id = serializer.loads(session_cookie, max_age=SESSION_MAX_AGE)
        return user_sessions.get(session_id)
    except SignatureExpired:
        # Signature is genuine, only too old
        user_sessions.pop(serializer.loads(session_cookie), None)
        return None
    except BadSignature:
        return None


def delete_session(session_cookie: Optional[str]) -> None:
    """Delete a user session.

    Args:
        session_cookie: Signed session cookie value to delete.
    """
    if not session_cookie:
        return

    try:
        session_id = serializer.loads(session_cookie, max_age=SESSION_MAX_AGE)
        user_sessions.pop(session_id, None)
    except (BadSignature, SignatureExpired):
        pass


def _session_response(payload: dict, user: User) -> JSONResponse:
    token = create_session(user.to_dict())
    response = JSONResponse(payload)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=False,  # Set to True in production with HTTPS
        samesite="lax",
    )
    return response


@router.post("/register", status_code=201)
def register(credentials: Credentials, db: Session = Depends(get_db)):
    """Create an account and log it in.

    Raises:
        HTTPException: If the username is invalid or taken, or the password
            is too short.
    """
    username = credentials.username.strip()
    if not username or len(username) > MAX_USERNAME_LEN:
        raise HTTPException(400, "Invalid username")
    if len(credentials.password) < MIN_PASSWORD_LEN:
        raise HTTPException(400, f"Password must be at least {MIN_PASSWORD_LEN} characters")
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(409, "Username already taken")

    user = User(username=username, password_hash=hash_password(credentials.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", username)

    response = _session_response({"authenticated": True, "user": user.to_dict()}, user)
    response.status_code = 201
    return response


@router.post("/login")
def login(credentials: Credentials, db: Session = Depends(get_db)):
    """Log in with username and password.

    Returns:
        JSONResponse with the user and a session cookie.

    Raises:
        HTTPException: If the credentials do not match.
    """
    user = db.query(User).filter(User.username == credentials.username.strip()).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %s", credentials.username)
        raise HTTPException(401, "Invalid username or password")

    return _session_response({"authenticated": True, "user": user.to_dict()}, user)


@router.post("/logout")
async def logout(session: Optional[str] = Cookie(None, alias=COOKIE_NAME)):
    """Log out the current user.

    Deletes the user session and clears the session cookie.
    """
    delete_session(session)

    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    response.delete_cookie(key=COOKIE_NAME)

    return response


@router.get("/me")
async def get_current_user(session: Optional[str] = Cookie(None, alias=COOKIE_NAME)):
    """Get current authenticated user information.

    Returns:
        JSON with user data if authenticated, or null user if not.
    """
    session_data = get_session_from_cookie(session)

    if session_data:
        return {"authenticated": True, "user": session_data["user"]}

    return {"authenticated": False, "user": None}
