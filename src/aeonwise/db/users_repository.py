"""Username/password accounts.

register_user and authenticate_user never raise for user-facing
failures (bad credentials, taken username, invalid input): they return
an AuthResult with success=False and a message.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
import uuid
from dataclasses import dataclass
from typing import Any

import structlog

from aeonwise.core.models import Profile
from aeonwise.db.database import Database, utc_now
from aeonwise.db.profiles_repository import (
    DuplicateUsernameError,
    create_profile,
    get_profile,
)

logger = structlog.get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,30}$")
MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 200_000

USERNAME_TAKEN_MESSAGE = "Username is already taken. Please choose a different username."
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


@dataclass
class AuthResult:
    """Outcome of a sign-in or sign-up attempt."""

    success: bool
    user: dict[str, Any] | None = None
    profile: Profile | None = None
    message: str = ""


def hash_password(password: str, salt: str) -> str:
    """PBKDF2-SHA256 hex digest."""
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return digest.hex()


def validate_credentials(username: str, password: str) -> str | None:
    """Return an error message for invalid input, or None."""
    if not USERNAME_PATTERN.match(username or ""):
        return "Username must be 3-30 characters: letters, digits or underscores"
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def register_user(db: Database, username: str, password: str) -> AuthResult:
    """Create credentials plus an empty profile sharing the same id."""
    error = validate_credentials(username, password)
    if error:
        return AuthResult(success=False, message=error)

    with db.connect() as conn:
        taken = conn.execute(
            "SELECT 1 FROM users WHERE username = ?", (username,)
        ).fetchone()
    if taken:
        return AuthResult(success=False, message=USERNAME_TAKEN_MESSAGE)

    user_id = str(uuid.uuid4())
    try:
        profile = create_profile(db, username=username, profile_id=user_id)
    except DuplicateUsernameError:
        return AuthResult(success=False, message=USERNAME_TAKEN_MESSAGE)

    salt = secrets.token_hex(16)
    created_at = utc_now()
    with db.connect() as conn:
        conn.execute(
            """
            INSERT INTO users (id, username, password_hash, salt, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, username, hash_password(password, salt), salt, created_at),
        )

    logger.info("users.registered", user_id=user_id, username=username)
    return AuthResult(
        success=True,
        user={"id": user_id, "username": username, "created_at": created_at},
        profile=profile,
    )


def authenticate_user(db: Database, username: str, password: str) -> AuthResult:
    """Check credentials and return the user with their profile."""
    with db.connect() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()

    if row is None:
        logger.info("users.auth_failed", username=username, reason="unknown_user")
        return AuthResult(success=False, message=INVALID_CREDENTIALS_MESSAGE)

    expected = row["password_hash"]
    if not hmac.compare_digest(expected, hash_password(password, row["salt"])):
        logger.info("users.auth_failed", username=username, reason="bad_password")
        return AuthResult(success=False, message=INVALID_CREDENTIALS_MESSAGE)

    profile = get_profile(db, row["id"])
    logger.info("users.authenticated", user_id=row["id"])
    return AuthResult(
        success=True,
        user={"id": row["id"], "username": row["username"], "created_at": row["created_at"]},
        profile=profile,
    )
