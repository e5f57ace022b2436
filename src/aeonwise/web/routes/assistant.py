"""AI assistant endpoints.

These never fail because of the model provider: the assistant strategy
falls back to canned content on its own.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from aeonwise.core.catalog import CourseNotFoundError, get_lesson
from aeonwise.services.assistant import LearningAssistant
from aeonwise.web.dependencies import get_assistant
from aeonwise.web.schemas import (
    AnswerResponse,
    GoalRequest,
    LearningPathResponse,
    QuestionRequest,
    RecommendationsResponse,
)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/path", response_model=LearningPathResponse)
def learning_path(
    request: GoalRequest, assistant: LearningAssistant = Depends(get_assistant)
) -> LearningPathResponse:
    """Ordered list of topics to study for a goal."""
    return LearningPathResponse(
        goal=request.goal, path=assistant.generate_learning_path(request.goal)
    )


@router.post("/recommendations", response_model=RecommendationsResponse)
def recommendations(
    request: GoalRequest, assistant: LearningAssistant = Depends(get_assistant)
) -> RecommendationsResponse:
    """Courses, mentors and peers for a goal."""
    result = assistant.recommend(request.goal)
    return RecommendationsResponse(goal=request.goal, **result.model_dump())


@router.post("/ask", response_model=AnswerResponse)
def ask(
    request: QuestionRequest, assistant: LearningAssistant = Depends(get_assistant)
) -> AnswerResponse:
    """Answer a question about a lesson.

    Context comes from the body, or from the lesson named by
    course_id/lesson_id.
    """
    context = request.context
    lesson_title = request.lesson_title

    if request.course_id and request.lesson_id:
        try:
            lesson = get_lesson(request.course_id, request.lesson_id)
        except CourseNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        context = context or lesson.content
        lesson_title = lesson_title or lesson.title

    if not context.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Question and lesson content are required",
        )

    answer = assistant.answer_question(request.question, context, lesson_title)
    return AnswerResponse(**answer.model_dump())
