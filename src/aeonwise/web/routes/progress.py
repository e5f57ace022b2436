"""Course progress endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aeonwise.core.catalog import CourseNotFoundError, get_course, get_lesson
from aeonwise.db.database import Database
from aeonwise.db.profiles_repository import ProfileNotFoundError, get_profile
from aeonwise.db.progress_repository import (
    complete_lesson,
    course_completion_ratio,
    get_course_progress,
    get_lesson_progress,
    save_progress,
)
from aeonwise.web.dependencies import get_database
from aeonwise.web.schemas import (
    CompletionRequest,
    CompletionResponse,
    CourseProgressResponse,
    ProgressResponse,
    ProgressUpdate,
)

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _require_profile(db: Database, user_id: str) -> None:
    if get_profile(db, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile '{user_id}' not found",
        )


def _require_lesson(course_id: str, lesson_id: str):
    try:
        return get_lesson(course_id, lesson_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{user_id}/{course_id}", response_model=CourseProgressResponse)
async def read_course_progress(
    user_id: str, course_id: str, db: Database = Depends(get_database)
) -> CourseProgressResponse:
    """All saved progress of a user in a course."""
    try:
        course = get_course(course_id)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    progress = get_course_progress(db, user_id, course_id)
    return CourseProgressResponse(
        course_id=course_id,
        lessons={lid: ProgressResponse(**p.to_dict()) for lid, p in progress.items()},
        completed_count=sum(1 for p in progress.values() if p.completed),
        completion=course_completion_ratio(progress, len(course.lessons)),
    )


@router.get("/{user_id}/{course_id}/{lesson_id}", response_model=ProgressResponse)
async def read_lesson_progress(
    user_id: str, course_id: str, lesson_id: str, db: Database = Depends(get_database)
) -> ProgressResponse:
    """Saved progress for one lesson."""
    progress = get_lesson_progress(db, user_id, course_id, lesson_id)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No progress saved for lesson '{lesson_id}'",
        )
    return ProgressResponse(**progress.to_dict())


@router.put("/{user_id}/{course_id}/{lesson_id}", response_model=ProgressResponse)
async def write_lesson_progress(
    user_id: str,
    course_id: str,
    lesson_id: str,
    update: ProgressUpdate,
    db: Database = Depends(get_database),
) -> ProgressResponse:
    """Save code and completion state for a lesson (last write wins)."""
    _require_profile(db, user_id)
    _require_lesson(course_id, lesson_id)

    progress = save_progress(
        db, user_id, course_id, lesson_id, code=update.code, completed=update.completed
    )
    return ProgressResponse(**progress.to_dict())


@router.post("/{user_id}/{course_id}/{lesson_id}/complete", response_model=CompletionResponse)
async def complete(
    user_id: str,
    course_id: str,
    lesson_id: str,
    body: CompletionRequest | None = None,
    db: Database = Depends(get_database),
) -> CompletionResponse:
    """Complete a lesson; points are awarded on the first completion only."""
    lesson = _require_lesson(course_id, lesson_id)

    try:
        result = complete_lesson(
            db, user_id, course_id, lesson, code=body.code if body else None
        )
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return CompletionResponse(
        progress=ProgressResponse(**result.progress.to_dict()),
        points_awarded=result.points_awarded,
        total_points=result.total_points,
        rank=result.rank,
        skill_added=result.skill_added,
    )
