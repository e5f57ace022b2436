"""Pydantic schemas for the Web API.

Request bodies are validated here; responses mirror the domain records.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from aeonwise.core.models import Profile
from aeonwise.core.ranking import get_rank, points_to_next_rank, rank_progress
from aeonwise.services.assistant import QAResponse, Recommendations


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


# =============================================================================
# AUTH / PROFILE SCHEMAS
# =============================================================================


class CredentialsRequest(BaseModel):
    """Request body for register and login."""

    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(..., min_length=6, max_length=200)


class WorkExperienceRecord(BaseModel):
    """Stored work experience as returned to clients."""

    job_title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: list[str] = Field(default_factory=list)


class ProjectRecord(BaseModel):
    name: str = ""
    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    start_date: str = ""
    end_date: str = ""
    url: str | None = None
    achievements: list[str] = Field(default_factory=list)


class CertificationRecord(BaseModel):
    name: str = ""
    organization: str = ""
    issue_date: str = ""
    expiry_date: str | None = None
    credential_id: str | None = None
    url: str | None = None


class WorkExperienceSchema(WorkExperienceRecord):
    job_title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)


class ProjectSchema(ProjectRecord):
    name: str = Field(..., min_length=1)


class CertificationSchema(CertificationRecord):
    name: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    username: str | None = Field(default=None, min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] | None = None
    learning_goals: list[str] | None = None
    work_experience: list[WorkExperienceSchema] | None = None
    projects: list[ProjectSchema] | None = None
    certifications: list[CertificationSchema] | None = None
    avatar_url: str | None = None

    def to_fields(self) -> dict[str, Any]:
        """Fields explicitly set by the client, as plain values.

        Explicit nulls are dropped except for avatar_url, which can be cleared.
        """
        fields = self.model_dump(exclude_unset=True)
        return {k: v for k, v in fields.items() if v is not None or k == "avatar_url"}


class ProfileResponse(BaseModel):
    """A profile with its rank standing."""

    id: str
    username: str
    bio: str
    skills: list[str]
    learning_goals: list[str]
    work_experience: list[WorkExperienceRecord]
    projects: list[ProjectRecord]
    certifications: list[CertificationRecord]
    points: int
    rank: str
    rank_title: str
    next_rank: str
    points_to_next_rank: int
    rank_progress: float
    avatar_url: str | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileResponse:
        data = profile.to_dict()
        nxt = points_to_next_rank(profile.points)
        rank = get_rank(profile.rank)
        return cls(
            **data,
            rank_title=rank.title if rank else profile.rank,
            next_rank=nxt.next_rank,
            points_to_next_rank=nxt.points_needed,
            rank_progress=rank_progress(profile.points),
        )


class AuthResponse(BaseModel):
    user_id: str
    username: str
    profile: ProfileResponse


class PointsHistoryEntry(BaseModel):
    id: int
    source: str
    points: int
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: str


class LeaderboardEntry(BaseModel):
    position: int
    id: str
    username: str
    points: int
    rank: str
    skills: list[str]
    avatar_url: str | None = None


class LeaderboardResponse(BaseModel):
    filter: Literal["all", "top10", "masters"]
    entries: list[LeaderboardEntry]
    count: int


class RankResponse(BaseModel):
    name: str
    title: str
    threshold: int


# =============================================================================
# COURSE / PROGRESS SCHEMAS
# =============================================================================


class ExerciseSchema(BaseModel):
    description: str
    starter_code: str = ""
    solution: str = ""
    hints: list[str] = Field(default_factory=list)


class SectionResponse(BaseModel):
    id: str
    type: str
    content: str
    level: int | None = None
    language: str | None = None
    audio_url: str | None = None


class LessonResponse(BaseModel):
    id: str
    title: str
    content: str
    key_points: list[str]
    exercise: ExerciseSchema | None = None
    narration_text: str = ""
    estimated_time: int = 0
    skill: str = ""
    sections: list[SectionResponse] = Field(default_factory=list)


class CourseSummary(BaseModel):
    id: str
    title: str
    description: str
    level: str
    duration: int
    category: str
    skill: str = ""
    modules: int


class CourseResponse(CourseSummary):
    lessons: list[LessonResponse] = Field(default_factory=list)


class CourseListResponse(BaseModel):
    courses: list[CourseSummary]
    count: int


class ProgressUpdate(BaseModel):
    """Request body for saving lesson progress."""

    code: str | None = None
    completed: bool = False


class ProgressResponse(BaseModel):
    user_id: str
    course_id: str
    lesson_id: str
    code: str
    completed: bool
    completion_time: str | None = None
    updated_at: str


class CourseProgressResponse(BaseModel):
    course_id: str
    lessons: dict[str, ProgressResponse]
    completed_count: int
    completion: float


class CompletionRequest(BaseModel):
    code: str | None = None


class CompletionResponse(BaseModel):
    progress: ProgressResponse
    points_awarded: int
    total_points: int
    rank: str
    skill_added: bool


class AudioResponse(BaseModel):
    section_id: str
    audio_url: str | None = None


# =============================================================================
# ASSISTANT / COMMUNITY SCHEMAS
# =============================================================================


class GoalRequest(BaseModel):
    goal: str = Field(..., min_length=1, max_length=200)


class LearningPathResponse(BaseModel):
    goal: str
    path: list[str]


class RecommendationsResponse(Recommendations):
    goal: str


class QuestionRequest(BaseModel):
    """A lesson question; course_id/lesson_id pull in the lesson as context."""

    question: str = Field(..., min_length=1, max_length=2000)
    context: str = ""
    lesson_title: str = ""
    course_id: str | None = None
    lesson_id: str | None = None


class AnswerResponse(QAResponse):
    pass


class SkillsRequest(BaseModel):
    text: str = Field(..., max_length=20000)


class SkillsResponse(BaseModel):
    skills: list[str]


class MatchEntry(BaseModel):
    id: str
    username: str
    bio: str
    skills: list[str]
    learning_goals: list[str]
    points: int
    rank: str
    match_score: int


class MatchListResponse(BaseModel):
    user_id: str
    matches: list[MatchEntry]
    count: int


class MentorUpdate(BaseModel):
    specialty: str = Field(..., min_length=1, max_length=200)
    category: str = ""
    bio: str = ""
    price: float = Field(default=0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    session_length: int = Field(default=60, gt=0)
    availability: str = ""


class MentorResponse(BaseModel):
    user_id: str
    username: str = ""
    specialty: str
    category: str
    bio: str
    price: float
    currency: str
    session_length: int
    availability: str
    rating: float
    sessions: int


class MentorListResponse(BaseModel):
    mentors: list[MentorResponse]
    count: int


class SavedMatchResponse(BaseModel):
    user_id: str
    matched_user_id: str
    match_score: int
    status: str
    created_at: str


class SwapCompletionRequest(BaseModel):
    skills_shared: int = Field(..., ge=0, le=100)


class SwapCompletionResponse(BaseModel):
    user_id: str
    matched_user_id: str
    total_points: int
    rank: str
