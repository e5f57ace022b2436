"""Repository functions for mentorship offers and skill-swap matches."""

from __future__ import annotations

import structlog

from aeonwise.core.models import Match, MentorProfile
from aeonwise.db.database import Database, utc_now
from aeonwise.db.profiles_repository import award_points

logger = structlog.get_logger(__name__)

MATCH_STATUSES = ("pending", "accepted", "completed")

# Skill-swap reward: per shared skill, capped
POINTS_PER_SHARED_SKILL = 50
MAX_SWAP_POINTS = 500


class MatchNotFoundError(Exception):
    """Raised when no match exists between two users."""

    def __init__(self, user_id: str, matched_user_id: str):
        self.user_id = user_id
        self.matched_user_id = matched_user_id
        super().__init__(f"No match between '{user_id}' and '{matched_user_id}'")


def upsert_mentor_profile(db: Database, mentor: MentorProfile) -> MentorProfile:
    """Create or replace the mentorship offer of a user."""
    with db.connect() as conn:
        conn.execute(
            """
            INSERT INTO mentorship_profiles (
                user_id, specialty, category, bio, price, currency,
                session_length, availability, rating, sessions, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id) DO UPDATE SET
                specialty = excluded.specialty,
                category = excluded.category,
                bio = excluded.bio,
                price = excluded.price,
                currency = excluded.currency,
                session_length = excluded.session_length,
                availability = excluded.availability,
                rating = excluded.rating,
                sessions = excluded.sessions,
                updated_at = excluded.updated_at
            """,
            (
                mentor.user_id,
                mentor.specialty,
                mentor.category,
                mentor.bio,
                mentor.price,
                mentor.currency,
                mentor.session_length,
                mentor.availability,
                mentor.rating,
                mentor.sessions,
                utc_now(),
            ),
        )

    logger.info("mentors.saved", user_id=mentor.user_id, specialty=mentor.specialty)
    return mentor


def get_mentor(db: Database, user_id: str) -> MentorProfile | None:
    with db.connect() as conn:
        row = conn.execute(
            "SELECT * FROM mentorship_profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
    return _row_to_mentor(row) if row else None


def list_mentors(db: Database, category: str | None = None) -> list[MentorProfile]:
    """Mentors ordered by rating, optionally limited to one category.

    Category comparison is case-insensitive; None or "all" disables it.
    """
    query = "SELECT * FROM mentorship_profiles"
    params: list = []
    if category and category.lower() != "all":
        query += " WHERE lower(category) = lower(?)"
        params.append(category)
    query += " ORDER BY rating DESC, sessions DESC"

    with db.connect() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_mentor(row) for row in rows]


def record_match(
    db: Database,
    user_id: str,
    matched_user_id: str,
    score: int,
    status: str = "pending",
) -> Match:
    """Store a match; re-recording the same pair updates its score.

    A completed match stays completed when re-recorded.
    """
    if status not in MATCH_STATUSES:
        raise ValueError(f"Unknown match status: {status}")

    match = Match(
        user_id=user_id,
        matched_user_id=matched_user_id,
        match_score=score,
        status=status,
        created_at=utc_now(),
    )
    with db.connect() as conn:
        conn.execute(
            """
            INSERT INTO matches (user_id, matched_user_id, match_score, status, created_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (user_id, matched_user_id) DO UPDATE SET
                match_score = excluded.match_score,
                status = CASE
                    WHEN matches.status = 'completed' THEN matches.status
                    ELSE excluded.status
                END
            """,
            (user_id, matched_user_id, score, status, match.created_at),
        )
        row = conn.execute(
            """
            SELECT status, created_at FROM matches
            WHERE user_id = ? AND matched_user_id = ?
            """,
            (user_id, matched_user_id),
        ).fetchone()
    match.status = row["status"]
    match.created_at = row["created_at"]

    logger.debug(
        "matches.recorded", user_id=user_id, matched_user_id=matched_user_id, score=score
    )
    return match


def list_matches(db: Database, user_id: str) -> list[Match]:
    """Matches recorded for a user, best score first."""
    with db.connect() as conn:
        rows = conn.execute(
            """
            SELECT * FROM matches WHERE user_id = ?
            ORDER BY match_score DESC, created_at ASC
            """,
            (user_id,),
        ).fetchall()

    return [Match.from_dict(dict(row)) for row in rows]


def _row_to_mentor(row) -> MentorProfile:
    return MentorProfile.from_dict(dict(row))


def complete_swap(db: Database, user_id: str, matched_user_id: str, skills_shared: int) -> int:
    """Mark a match completed and reward the user for the skills shared.

    Awards POINTS_PER_SHARED_SKILL per skill, at most MAX_SWAP_POINTS.
    Completing an already completed match awards nothing.

    Returns:
        The user's new points total

    Raises:
        MatchNotFoundError: If the pair was never matched
        ValueError: If skills_shared is negative
    """
    if skills_shared < 0:
        raise ValueError("skills_shared must not be negative")

    with db.connect() as conn:
        row = conn.execute(
            "SELECT status FROM matches WHERE user_id = ? AND matched_user_id = ?",
            (user_id, matched_user_id),
        ).fetchone()
        if row is None:
            raise MatchNotFoundError(user_id, matched_user_id)
        cursor = conn.execute(
            """
            UPDATE matches SET status = 'completed'
            WHERE user_id = ? AND matched_user_id = ? AND status != 'completed'
            """,
            (user_id, matched_user_id),
        )
        newly_completed = cursor.rowcount > 0
        if not newly_completed:
            total = conn.execute(
                "SELECT points FROM profiles WHERE id = ?", (user_id,)
            ).fetchone()["points"]

    if not newly_completed:
        logger.info(
            "matches.already_completed", user_id=user_id, matched_user_id=matched_user_id
        )
        return total

    points = min(skills_shared * POINTS_PER_SHARED_SKILL, MAX_SWAP_POINTS)
    return award_points(
        db,
        user_id,
        source="skill_swap",
        points=points,
        details={"matched_user_id": matched_user_id, "skills_shared": skills_shared},
    )
