"""Static course catalog.

Courses ship as YAML files under aeonwise/data/courses/ and are loaded
once per process.

Usage:
    from aeonwise.core.catalog import get_lesson

    lesson = get_lesson("python-basics", "variables")
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml

from aeonwise.core.models import Course, Lesson

logger = structlog.get_logger(__name__)

COURSES_DIR = Path(__file__).resolve().parent.parent / "data" / "courses"

# Module-level cache
_cached_courses: dict[str, Course] | None = None


class CourseNotFoundError(Exception):
    """Raised when a course or lesson id is unknown."""

    pass


def load_courses(courses_dir: Path | None = None, force_reload: bool = False) -> dict[str, Course]:
    """Load all course YAML files, keyed by course id."""
    global _cached_courses

    if _cached_courses is not None and not force_reload and courses_dir is None:
        return _cached_courses

    source = courses_dir or COURSES_DIR
    courses: dict[str, Course] = {}
    for path in sorted(source.glob("*.yaml")):
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        course = Course.from_dict(data)
        courses[course.id] = course

    logger.debug("catalog.loaded", source=str(source), courses=list(courses))

    if courses_dir is None:
        _cached_courses = courses
    return courses


def list_courses() -> list[Course]:
    """All bundled courses, in file order."""
    return list(load_courses().values())


def get_course(course_id: str) -> Course:
    """Get a course by id.

    Raises:
        CourseNotFoundError: If the course does not exist
    """
    course = load_courses().get(course_id)
    if course is None:
        raise CourseNotFoundError(f"Course '{course_id}' not found")
    return course


def get_lesson(course_id: str, lesson_id: str) -> Lesson:
    """Get a lesson within a course.

    Raises:
        CourseNotFoundError: If the course or lesson does not exist
    """
    lesson = get_course(course_id).get_lesson(lesson_id)
    if lesson is None:
        raise CourseNotFoundError(f"Lesson '{lesson_id}' not found in course '{course_id}'")
    return lesson
