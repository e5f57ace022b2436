"""Repository functions for profiles and the points ledger.

Points are recomputed from the profile on every update unless the caller
passes an explicit value, which is stored as-is.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from typing import Any

import structlog

from aeonwise.core.models import Certification, Profile, Project, WorkExperience
from aeonwise.core.ranking import calculate_points, calculate_rank
from aeonwise.db.database import Database, utc_now

logger = structlog.get_logger(__name__)

LEADERBOARD_FILTERS = ("all", "top10", "masters")
MASTER_RANKS = ("galactic_guide", "cosmic_sage")

_JSON_FIELDS = ("skills", "learning_goals", "work_experience", "projects", "certifications")
_UPDATABLE_FIELDS = set(_JSON_FIELDS) | {"bio", "avatar_url", "points", "username"}


class ProfileNotFoundError(Exception):
    """Raised when a profile id does not exist."""

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Profile '{profile_id}' not found")


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' is already taken")


def _serialize(value: Any) -> Any:
    if isinstance(value, list):
        return json.dumps(
            [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        )
    return value


def create_profile(
    db: Database,
    username: str,
    profile_id: str | None = None,
    bio: str = "",
    skills: list[str] | None = None,
    learning_goals: list[str] | None = None,
) -> Profile:
    """Insert a new profile.

    Raises:
        DuplicateUsernameError: If the username is already taken
    """
    now = utc_now()
    profile = Profile(
        id=profile_id or str(uuid.uuid4()),
        username=username,
        bio=bio,
        skills=list(skills or []),
        learning_goals=list(learning_goals or []),
        created_at=now,
        updated_at=now,
    )
    profile.points = calculate_points(profile)

    try:
        with db.connect() as conn:
            conn.execute(
                """
                INSERT INTO profiles (
                    id, username, bio, skills, learning_goals,
                    points, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    profile.id,
                    profile.username,
                    profile.bio,
                    json.dumps(profile.skills),
                    json.dumps(profile.learning_goals),
                    profile.points,
                    now,
                    now,
                ),
            )
    except sqlite3.IntegrityError as e:
        if "profiles.username" in str(e):
            raise DuplicateUsernameError(username) from e
        raise

    logger.debug("profiles.created", profile_id=profile.id, username=username)
    return profile


def get_profile(db: Database, profile_id: str) -> Profile | None:
    """Get profile by id, or None."""
    with db.connect() as conn:
        row = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,)).fetchone()
    return _row_to_profile(row) if row else None


def get_profile_by_username(db: Database, username: str) -> Profile | None:
    """Get profile by username, or None."""
    with db.connect() as conn:
        row = conn.execute(
            "SELECT * FROM profiles WHERE username = ?", (username,)
        ).fetchone()
    return _row_to_profile(row) if row else None


def list_profiles(db: Database) -> list[Profile]:
    """All profiles, highest points first."""
    with db.connect() as conn:
        rows = conn.execute(
            "SELECT * FROM profiles ORDER BY points DESC, username ASC"
        ).fetchall()
    return [_row_to_profile(row) for row in rows]


def update_profile(db: Database, profile_id: str, **fields: Any) -> Profile:
    """Apply a partial update and store the recomputed points.

    Args:
        db: Database handle
        profile_id: Profile to update
        **fields: Any of bio, skills, learning_goals, work_experience,
            projects, certifications, avatar_url, username, points.
            Record lists may hold dataclasses or plain dicts.

    Returns:
        The updated Profile

    Raises:
        ProfileNotFoundError: If the profile does not exist
        ValueError: If an unknown field is passed
    """
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {sorted(unknown)}")

    current = get_profile(db, profile_id)
    if current is None:
        raise ProfileNotFoundError(profile_id)

    merged = current.to_dict()
    for key, value in fields.items():
        if isinstance(value, list):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        merged[key] = value
    updated = Profile.from_dict(merged)

    if "points" not in fields:
        updated.points = calculate_points(updated)
    updated.updated_at = utc_now()

    try:
        with db.connect() as conn:
            conn.execute(
                """
                UPDATE profiles SET
                    username = ?, bio = ?, skills = ?, learning_goals = ?,
                    work_experience = ?, projects = ?, certifications = ?,
                    points = ?, avatar_url = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    updated.username,
                    updated.bio,
                    _serialize(updated.skills),
                    _serialize(updated.learning_goals),
                    _serialize(updated.work_experience),
                    _serialize(updated.projects),
                    _serialize(updated.certifications),
                    updated.points,
                    updated.avatar_url,
                    updated.updated_at,
                    profile_id,
                ),
            )
    except sqlite3.IntegrityError as e:
        if "profiles.username" in str(e):
            raise DuplicateUsernameError(updated.username) from e
        raise

    logger.info(
        "profiles.updated",
        profile_id=profile_id,
        fields=sorted(fields),
        points=updated.points,
        rank=updated.rank,
    )
    return updated


def delete_profile(db: Database, profile_id: str) -> bool:
    """Delete a profile and its dependent rows.

    Returns:
        True if deleted, False if not found
    """
    with db.connect() as conn:
        cursor = conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("profiles.deleted", profile_id=profile_id)
    return deleted


def list_leaderboard(db: Database, filter: str = "all") -> list[dict[str, Any]]:
    """Ranked profiles with 1-based positions.

    Args:
        db: Database handle
        filter: "all", "top10" (first ten positions) or "masters"
            (galactic_guide and above)

    Raises:
        ValueError: On an unknown filter
    """
    if filter not in LEADERBOARD_FILTERS:
        raise ValueError(f"Unknown leaderboard filter: {filter}")

    entries = []
    for position, profile in enumerate(list_profiles(db), start=1):
        entries.append(
            {
                "position": position,
                "id": profile.id,
                "username": profile.username,
                "points": profile.points,
                "rank": profile.rank,
                "skills": profile.skills,
                "avatar_url": profile.avatar_url,
            }
        )

    if filter == "top10":
        return entries[:10]
    if filter == "masters":
        return [e for e in entries if e["rank"] in MASTER_RANKS]
    return entries


def award_points(
    db: Database,
    user_id: str,
    source: str,
    points: int,
    details: dict[str, Any] | None = None,
) -> int:
    """Record a ledger entry and add points to the profile total.

    Returns:
        The new points total

    Raises:
        ProfileNotFoundError: If the profile does not exist
    """
    now = utc_now()
    with db.connect() as conn:
        cursor = conn.execute(
            "UPDATE profiles SET points = points + ?, updated_at = ? WHERE id = ?",
            (points, now, user_id),
        )
        if cursor.rowcount == 0:
            raise ProfileNotFoundError(user_id)
        conn.execute(
            """
            INSERT INTO rank_points (user_id, source, points, details, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, source, points, json.dumps(details or {}), now),
        )
        total = conn.execute(
            "SELECT points FROM profiles WHERE id = ?", (user_id,)
        ).fetchone()["points"]

    logger.info(
        "profiles.points_awarded",
        user_id=user_id,
        source=source,
        points=points,
        total=total,
        rank=calculate_rank(total),
    )
    return total


def get_points_history(db: Database, user_id: str) -> list[dict[str, Any]]:
    """Ledger entries for a user, newest first."""
    with db.connect() as conn:
        rows = conn.execute(
            """
            SELECT * FROM rank_points WHERE user_id = ?
            ORDER BY created_at DESC, id DESC
            """,
            (user_id,),
        ).fetchall()

    return [
        {
            "id": row["id"],
            "source": row["source"],
            "points": row["points"],
            "details": json.loads(row["details"]) if row["details"] else {},
            "created_at": row["created_at"],
        }
        for row in rows
    ]


def _row_to_profile(row) -> Profile:
    """Convert database row to Profile."""
    def _load(column: str) -> list:
        return json.loads(row[column]) if row[column] else []

    return Profile(
        id=row["id"],
        username=row["username"],
        bio=row["bio"] or "",
        skills=_load("skills"),
        learning_goals=_load("learning_goals"),
        work_experience=[WorkExperience.from_dict(w) for w in _load("work_experience")],
        projects=[Project.from_dict(p) for p in _load("projects")],
        certifications=[Certification.from_dict(c) for c in _load("certifications")],
        points=row["points"],
        avatar_url=row["avatar_url"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )

