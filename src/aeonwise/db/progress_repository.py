"""Repository functions for course progress.

Rows are keyed by (user_id, course_id, lesson_id) and written with an
upsert, so concurrent writers resolve as last write wins.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from aeonwise.core.models import CourseProgress, Lesson
from aeonwise.core.ranking import LESSON_COMPLETION_POINTS
from aeonwise.db.database import Database, utc_now
from aeonwise.db.profiles_repository import (
    ProfileNotFoundError,
    award_points,
    get_profile,
    update_profile,
)

logger = structlog.get_logger(__name__)


@dataclass
class LessonCompletion:
    """Result of completing a lesson."""

    progress: CourseProgress
    points_awarded: int
    total_points: int
    rank: str
    skill_added: bool


def get_lesson_progress(
    db: Database, user_id: str, course_id: str, lesson_id: str
) -> CourseProgress | None:
    """Get a single progress row, or None."""
    with db.connect() as conn:
        row = conn.execute(
            """
            SELECT * FROM course_progress
            WHERE user_id = ? AND course_id = ? AND lesson_id = ?
            """,
            (user_id, course_id, lesson_id),
        ).fetchone()
    return _row_to_progress(row) if row else None


def get_course_progress(
    db: Database, user_id: str, course_id: str
) -> dict[str, CourseProgress]:
    """All progress rows of a user in a course, keyed by lesson id."""
    with db.connect() as conn:
        rows = conn.execute(
            "SELECT * FROM course_progress WHERE user_id = ? AND course_id = ?",
            (user_id, course_id),
        ).fetchall()
    return {row["lesson_id"]: _row_to_progress(row) for row in rows}


def save_progress(
    db: Database,
    user_id: str,
    course_id: str,
    lesson_id: str,
    code: str | None = None,
    completed: bool = False,
) -> CourseProgress:
    """Insert or overwrite the progress row for a lesson.

    Empty or missing code keeps whatever code is already stored.
    completion_time is set when completed, cleared otherwise.
    """
    now = utc_now()
    if not code:
        existing = get_lesson_progress(db, user_id, course_id, lesson_id)
        code = existing.code if existing else ""

    progress = CourseProgress(
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson_id,
        code=code,
        completed=completed,
        completion_time=now if completed else None,
        updated_at=now,
    )

    with db.connect() as conn:
        conn.execute(
            """
            INSERT INTO course_progress (
                user_id, course_id, lesson_id, code,
                completed, completion_time, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id, course_id, lesson_id) DO UPDATE SET
                code = excluded.code,
                completed = excluded.completed,
                completion_time = excluded.completion_time,
                updated_at = excluded.updated_at
            """,
            (
                user_id,
                course_id,
                lesson_id,
                progress.code,
                int(progress.completed),
                progress.completion_time,
                now,
            ),
        )

    logger.debug(
        "progress.saved",
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson_id,
        completed=completed,
    )
    return progress


def complete_lesson(
    db: Database,
    user_id: str,
    course_id: str,
    lesson: Lesson,
    code: str | None = None,
) -> LessonCompletion:
    """Mark a lesson complete and award points on the first completion.

    The lesson's skill is added to the profile the first time too.

    Raises:
        ProfileNotFoundError: If the user has no profile
    """
    profile = get_profile(db, user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)

    already_awarded = _completion_awarded(db, user_id, course_id, lesson.id)

    progress = save_progress(db, user_id, course_id, lesson.id, code=code, completed=True)

    if already_awarded:
        return LessonCompletion(
            progress=progress,
            points_awarded=0,
            total_points=profile.points,
            rank=profile.rank,
            skill_added=False,
        )

    skill_added = bool(lesson.skill) and lesson.skill not in profile.skills
    if skill_added:
        # Keep the stored points: lesson points live in the ledger
        update_profile(
            db, user_id, skills=profile.skills + [lesson.skill], points=profile.points
        )

    total = award_points(
        db,
        user_id,
        source="lesson_completion",
        points=LESSON_COMPLETION_POINTS,
        details={"course_id": course_id, "lesson_id": lesson.id, "skill": lesson.skill},
    )
    refreshed = get_profile(db, user_id)

    logger.info(
        "progress.lesson_completed",
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson.id,
        total_points=total,
    )
    return LessonCompletion(
        progress=progress,
        points_awarded=LESSON_COMPLETION_POINTS,
        total_points=total,
        rank=refreshed.rank if refreshed else profile.rank,
        skill_added=skill_added,
    )


def _completion_awarded(db: Database, user_id: str, course_id: str, lesson_id: str) -> bool:
    """Whether the ledger already holds a lesson_completion entry for this lesson.

    Un-completing a lesson does not remove the entry, so points are paid once.
    """
    with db.connect() as conn:
        row = conn.execute(
            """
            SELECT 1 FROM rank_points
            WHERE user_id = ? AND source = 'lesson_completion'
              AND json_extract(details, '$.course_id') = ?
              AND json_extract(details, '$.lesson_id') = ?
            LIMIT 1
            """,
            (user_id, course_id, lesson_id),
        ).fetchone()
    return row is not None


def course_completion_ratio(progress: dict[str, CourseProgress], lesson_count: int) -> float:
    """Share of lessons completed, 0.0-1.0."""
    if lesson_count <= 0:
        return 0.0
    done = sum(1 for p in progress.values() if p.completed)
    return min(done / lesson_count, 1.0)


def _row_to_progress(row) -> CourseProgress:
    """Convert database row to CourseProgress."""
    return CourseProgress.from_dict(dict(row))
