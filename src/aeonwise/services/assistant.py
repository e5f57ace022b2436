"""AI learning assistant: learning paths, recommendations and lesson Q&A.

Two interchangeable strategies implement LearningAssistant:

- MockAssistant returns canned content derived from the goal.
- LLMAssistant asks a chat-completion model and validates the reply;
  any provider, parse or validation failure degrades to its fallback
  strategy (a MockAssistant by default) with a warning logged.

Usage:
    from aeonwise.services.assistant import get_assistant

    assistant = get_assistant()
    steps = assistant.generate_learning_path("Web Development")
"""

from __future__ import annotations

from typing import Protocol

import structlog
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from aeonwise.config.app_config import AppConfig, load_app_config
from aeonwise.llm.client import LLMClient, LLMConfig, LLMError, Message
from aeonwise.utils.text_utils import extract_json_array, strip_think

logger = structlog.get_logger(__name__)

MOCK_CONFIDENCE = 0.75
LLM_CONFIDENCE = 0.85

MOCK_ANSWER = (
    "That's a great question! This concept is fundamental to understanding the "
    "topic. Let me break it down for you step by step."
)

LEARNING_PATH_PROMPT = (
    "Generate a learning path as a JSON array for the given goal. "
    'Example: "Web Development" -> ["HTML Basics", "CSS Fundamentals", '
    '"JavaScript Essentials", "React Framework"]. '
    "Ensure paths are logical and concise. Respond with the JSON array only."
)

RECOMMENDATIONS_PROMPT = """You are an AI assistant for AeonWise, a skill-sharing platform. Based on the user's learning goal, provide recommendations in JSON format with three arrays:

1. "courses" - Array of 3 course objects with: title, description, level (beginner/intermediate/advanced), duration (in hours), modules (number), category
2. "mentors" - Array of 3 mentor objects with: name, specialty, price (number), currency ("USD"), sessionLength (in minutes), bio, rating (4.0-5.0)
3. "matches" - Array of 3 user match objects with: name, skills (array), bio, matchScore (1-10)

Make recommendations realistic and relevant to the learning goal.

IMPORTANT: You must respond with ONLY valid JSON. Do not include any explanatory text before or after the JSON."""

QA_PROMPT = """You are an AI teaching assistant for AeonWise, helping students learn programming. You are currently helping with a lesson titled "{lesson_title}".

Your role is to:
- Answer questions clearly and concisely
- Give practical examples when appropriate
- Keep responses focused on the lesson topic
- Use a friendly, supportive tone

Lesson content for context:
{context}"""


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class CourseSuggestion(BaseModel):
    """Course recommended for a goal."""

    id: str = ""
    title: str = Field(..., min_length=1)
    description: str = ""
    level: str = "beginner"
    duration: float = 0
    modules: int = 0
    category: str = "General"


class MentorSuggestion(BaseModel):
    """Mentor recommended for a goal."""

    id: str = ""
    name: str = Field(..., min_length=1)
    specialty: str = ""
    price: float = 0
    currency: str = "USD"
    session_length: int = Field(
        default=60, validation_alias=AliasChoices("session_length", "sessionLength")
    )
    bio: str = ""
    rating: float = Field(default=0, ge=0, le=5)


class MatchSuggestion(BaseModel):
    """Peer recommended for a skill swap."""

    id: str = ""
    name: str = Field(..., min_length=1)
    skills: list[str] = Field(default_factory=list)
    bio: str = ""
    match_score: int = Field(
        default=0, validation_alias=AliasChoices("match_score", "matchScore")
    )


class Recommendations(BaseModel):
    """Courses, mentors and matches for a learning goal."""

    courses: list[CourseSuggestion] = Field(default_factory=list)
    mentors: list[MentorSuggestion] = Field(default_factory=list)
    matches: list[MatchSuggestion] = Field(default_factory=list)


class QAResponse(BaseModel):
    """Answer to a lesson question."""

    answer: str
    confidence: float = Field(..., ge=0, le=1)
    sources: list[str] = Field(default_factory=list)


class LearningPath(BaseModel):
    steps: list[str] = Field(..., min_length=1)


# =============================================================================
# STRATEGIES
# =============================================================================


class LearningAssistant(Protocol):
    """Interface shared by the assistant strategies."""

    def generate_learning_path(self, goal: str) -> list[str]: ...

    def recommend(self, goal: str) -> Recommendations: ...

    def answer_question(
        self, question: str, context: str, lesson_title: str = ""
    ) -> QAResponse: ...


class MockAssistant:
    """Deterministic canned content built from the goal."""

    def generate_learning_path(self, goal: str) -> list[str]:
        return [
            f"{goal} Fundamentals",
            f"Core {goal} Concepts",
            f"Hands-on {goal} Projects",
            f"Advanced {goal}",
        ]

    def recommend(self, goal: str) -> Recommendations:
        courses = [
            CourseSuggestion(
                id="mock-course-1",
                title=f"Introduction to {goal}",
                description=f"Learn the fundamentals of {goal} from scratch with hands-on projects",
                level="beginner",
                duration=8,
                modules=6,
                category="General",
            ),
            CourseSuggestion(
                id="mock-course-2",
                title=f"Advanced {goal} Techniques",
                description=f"Master advanced concepts and best practices in {goal}",
                level="intermediate",
                duration=12,
                modules=10,
                category="Advanced",
            ),
            CourseSuggestion(
                id="mock-course-3",
                title=f"{goal} for Professionals",
                description=f"Professional-level {goal} skills for career advancement",
                level="advanced",
                duration=16,
                modules=12,
                category="Professional",
            ),
        ]
        mentors = [
            MentorSuggestion(
                id="mock-mentor-1",
                name="Alex Johnson",
                specialty=goal,
                price=75,
                session_length=60,
                bio=f"Expert in {goal} with 8+ years of experience helping students master the subject",
                rating=4.8,
            ),
            MentorSuggestion(
                id="mock-mentor-2",
                name="Sarah Chen",
                specialty=f"Advanced {goal}",
                price=95,
                session_length=45,
                bio=f"Senior specialist in {goal} with industry experience and proven teaching methods",
                rating=4.9,
            ),
            MentorSuggestion(
                id="mock-mentor-3",
                name="Mike Rodriguez",
                specialty=f"{goal} Fundamentals",
                price=60,
                session_length=60,
                bio=f"Passionate educator specializing in making {goal} accessible to beginners",
                rating=4.7,
            ),
        ]
        matches = [
            MatchSuggestion(
                id="mock-match-1",
                name="Emma Wilson",
                skills=[goal, "Teaching", "Mentoring"],
                bio=f"Experienced in {goal} and loves helping others learn",
                match_score=9,
            ),
            MatchSuggestion(
                id="mock-match-2",
                name="David Kim",
                skills=[goal, "Project Management", "Communication"],
                bio=f"Professional with strong {goal} background, happy to share knowledge",
                match_score=8,
            ),
            MatchSuggestion(
                id="mock-match-3",
                name="Lisa Thompson",
                skills=[goal, "Problem Solving", "Collaboration"],
                bio=f"Enthusiastic learner and teacher in the {goal} community",
                match_score=7,
            ),
        ]
        return Recommendations(courses=courses, mentors=mentors, matches=matches)

    def answer_question(
        self, question: str, context: str, lesson_title: str = ""
    ) -> QAResponse:
        return QAResponse(
            answer=MOCK_ANSWER,
            confidence=MOCK_CONFIDENCE,
            sources=["Course Material", "Educational Database"],
        )


class LLMAssistant:
    """Assistant backed by a chat-completion model.

    Every public method returns the fallback's result instead of raising
    when the model call, parsing or validation fails.
    """

    def __init__(self, client: LLMClient, fallback: LearningAssistant | None = None):
        self.client = client
        self.fallback = fallback or MockAssistant()

    def _fallback(self, operation: str, error: Exception) -> None:
        logger.warning(
            "assistant.fallback",
            operation=operation,
            provider=self.client.config.provider,
            error=str(error),
        )

    def generate_learning_path(self, goal: str) -> list[str]:
        try:
            content = self.client.simple_chat(
                LEARNING_PATH_PROMPT, goal, temperature=0.3, max_tokens=500
            )
            steps = extract_json_array(content)
            if steps is None:
                raise ValueError("No JSON array in model reply")
            path = LearningPath.model_validate({"steps": steps})
        except (LLMError, ValueError, ValidationError) as e:
            self._fallback("learning_path", e)
            return self.fallback.generate_learning_path(goal)

        logger.info("assistant.learning_path", goal=goal, steps=len(path.steps))
        return path.steps

    def recommend(self, goal: str) -> Recommendations:
        try:
            data = self.client.chat_json(
                [
                    Message(role="system", content=RECOMMENDATIONS_PROMPT),
                    Message(
                        role="user",
                        content=f"Generate recommendations for someone wanting to learn: {goal}",
                    ),
                ],
                max_tokens=1500,
            )
            recommendations = Recommendations.model_validate(data)
        except (LLMError, ValidationError) as e:
            self._fallback("recommend", e)
            return self.fallback.recommend(goal)

        for kind, items in (
            ("course", recommendations.courses),
            ("mentor", recommendations.mentors),
            ("match", recommendations.matches),
        ):
            for i, item in enumerate(items):
                item.id = f"ai-{kind}-{i}"

        logger.info(
            "assistant.recommendations",
            goal=goal,
            courses=len(recommendations.courses),
            mentors=len(recommendations.mentors),
            matches=len(recommendations.matches),
        )
        return recommendations

    def answer_question(
        self, question: str, context: str, lesson_title: str = ""
    ) -> QAResponse:
        system_prompt = QA_PROMPT.format(lesson_title=lesson_title or "Untitled", context=context)
        try:
            answer = strip_think(
                self.client.simple_chat(system_prompt, question, max_tokens=500)
            )
            if not answer:
                raise ValueError("Empty answer")
        except (LLMError, ValueError) as e:
            self._fallback("answer_question", e)
            return self.fallback.answer_question(question, context, lesson_title)

        return QAResponse(
            answer=answer,
            confidence=LLM_CONFIDENCE,
            sources=["Lesson Content", "AI Knowledge Base"],
        )


def get_assistant(
    config: AppConfig | None = None, client: LLMClient | None = None
) -> LearningAssistant:
    """Select the assistant strategy from configuration.

    mode "llm" with a configured client gives an LLMAssistant; anything
    else (mode "mock", missing API key, unknown provider) a MockAssistant.
    """
    if config is None:
        config = load_app_config()

    if config.assistant.mode != "llm":
        logger.info("assistant.selected", strategy="mock", reason="mode")
        return MockAssistant()

    if client is None:
        try:
            client = LLMClient(config=LLMConfig.from_app_config(config))
        except LLMError as e:
            logger.warning("assistant.selected", strategy="mock", reason=str(e))
            return MockAssistant()

    if not client.is_configured:
        logger.info(
            "assistant.selected",
            strategy="mock",
            reason="missing_api_key",
            provider=client.config.provider,
        )
        return MockAssistant()

    logger.info("assistant.selected", strategy="llm", provider=client.config.provider)
    return LLMAssistant(client)
