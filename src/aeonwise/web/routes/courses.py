"""Course catalog and narration endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aeonwise.core.catalog import CourseNotFoundError, get_course, get_lesson, list_courses
from aeonwise.core.models import Lesson
from aeonwise.core.sectionizer import sectionize
from aeonwise.services.speech import NarrationService
from aeonwise.web.dependencies import get_narration
from aeonwise.web.schemas import (
    AudioResponse,
    CourseListResponse,
    CourseResponse,
    CourseSummary,
    LessonResponse,
    SectionResponse,
)

router = APIRouter(prefix="/api/courses", tags=["courses"])


def _lesson_response(lesson: Lesson, with_sections: bool = True) -> LessonResponse:
    sections = sectionize(lesson.content) if with_sections else []
    return LessonResponse(
        **lesson.to_dict(),
        sections=[SectionResponse(**s.to_dict()) for s in sections],
    )


def _lookup_lesson(course_id: str, lesson_id: str) -> Lesson:
    try:
        return get_lesson(course_id, lesson_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=CourseListResponse)
async def list_all_courses() -> CourseListResponse:
    """List the course catalog."""
    courses = [CourseSummary(**c.to_dict(include_lessons=False)) for c in list_courses()]
    return CourseListResponse(courses=courses, count=len(courses))


@router.get("/{course_id}", response_model=CourseResponse)
async def read_course(course_id: str) -> CourseResponse:
    """Get a course with its lessons (without sections)."""
    try:
        course = get_course(course_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return CourseResponse(
        **course.to_dict(include_lessons=False),
        lessons=[_lesson_response(lesson, with_sections=False) for lesson in course.lessons],
    )


@router.get("/{course_id}/lessons/{lesson_id}", response_model=LessonResponse)
async def read_lesson(course_id: str, lesson_id: str) -> LessonResponse:
    """Get a lesson with its content split into sections."""
    return _lesson_response(_lookup_lesson(course_id, lesson_id))


@router.post(
    "/{course_id}/lessons/{lesson_id}/sections/{section_id}/audio",
    response_model=AudioResponse,
)
def narrate_section(
    course_id: str,
    lesson_id: str,
    section_id: str,
    narration: NarrationService = Depends(get_narration),
) -> AudioResponse:
    """Generate narration for one section.

    audio_url is null when speech is unavailable.
    """
    lesson = _lookup_lesson(course_id, lesson_id)
    section = next((s for s in sectionize(lesson.content) if s.id == section_id), None)
    if section is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Section '{section_id}' not found in lesson '{lesson_id}'",
        )

    narration.narrate_section(section)
    return AudioResponse(section_id=section.id, audio_url=section.audio_url)
