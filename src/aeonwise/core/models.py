"""Domain records for profiles, lessons and progress.

All records are plain dataclasses with to_dict/from_dict helpers.
from_dict ignores unknown keys and defaults missing list fields to
empty lists, so rows and request bodies with partial shapes load cleanly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal

from aeonwise.core.ranking import calculate_rank

SectionType = Literal["heading", "paragraph", "code", "list", "quote"]

LIST_MARKER_PATTERN = re.compile(r"^\s*(?:[-*]|\d+\.)\s+")


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(v) for v in value]


# =============================================================================
# PROFILE
# =============================================================================


@dataclass
class WorkExperience:
    """A work-history entry on a profile."""

    job_title: str
    company: str
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_title": self.job_title,
            "company": self.company,
            "location": self.location,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "current": self.current,
            "description": self.description,
            "achievements": list(self.achievements),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkExperience:
        return cls(
            job_title=data.get("job_title", ""),
            company=data.get("company", ""),
            location=data.get("location", ""),
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            current=bool(data.get("current", False)),
            description=data.get("description", ""),
            achievements=_str_list(data.get("achievements")),
        )


@dataclass
class Project:
    """A portfolio project on a profile."""

    name: str
    description: str = ""
    technologies: list[str] = field(default_factory=list)
    start_date: str = ""
    end_date: str = ""
    url: str | None = None
    achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "technologies": list(self.technologies),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "url": self.url,
            "achievements": list(self.achievements),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            technologies=_str_list(data.get("technologies")),
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            url=data.get("url"),
            achievements=_str_list(data.get("achievements")),
        )


@dataclass
class Certification:
    """A professional certification on a profile."""

    name: str
    organization: str = ""
    issue_date: str = ""
    expiry_date: str | None = None
    credential_id: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "organization": self.organization,
            "issue_date": self.issue_date,
            "expiry_date": self.expiry_date,
            "credential_id": self.credential_id,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Certification:
        return cls(
            name=data.get("name", ""),
            organization=data.get("organization", ""),
            issue_date=data.get("issue_date", ""),
            expiry_date=data.get("expiry_date"),
            credential_id=data.get("credential_id"),
            url=data.get("url"),
        )


@dataclass
class Profile:
    """A learner's public profile.

    points is whatever was last stored; it is not guaranteed to equal
    calculate_points(profile).
    """

    id: str
    username: str
    bio: str = ""
    skills: list[str] = field(default_factory=list)
    learning_goals: list[str] = field(default_factory=list)
    work_experience: list[WorkExperience] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    certifications: list[Certification] = field(default_factory=list)
    points: int = 0
    avatar_url: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def rank(self) -> str:
        """Tier derived from the stored points."""
        return calculate_rank(self.points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "bio": self.bio,
            "skills": list(self.skills),
            "learning_goals": list(self.learning_goals),
            "work_experience": [w.to_dict() for w in self.work_experience],
            "projects": [p.to_dict() for p in self.projects],
            "certifications": [c.to_dict() for c in self.certifications],
            "points": self.points,
            "rank": self.rank,
            "avatar_url": self.avatar_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(
            id=data.get("id", ""),
            username=data.get("username", ""),
            bio=data.get("bio") or "",
            skills=_str_list(data.get("skills")),
            learning_goals=_str_list(data.get("learning_goals")),
            work_experience=[
                WorkExperience.from_dict(w) for w in data.get("work_experience") or []
            ],
            projects=[Project.from_dict(p) for p in data.get("projects") or []],
            certifications=[
                Certification.from_dict(c) for c in data.get("certifications") or []
            ],
            points=int(data.get("points") or 0),
            avatar_url=data.get("avatar_url"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


# =============================================================================
# LESSON CONTENT
# =============================================================================


@dataclass
class Exercise:
    """Practical exercise attached to a lesson."""

    description: str
    starter_code: str = ""
    solution: str = ""
    hints: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "starter_code": self.starter_code,
            "solution": self.solution,
            "hints": list(self.hints),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exercise:
        return cls(
            description=data.get("description", ""),
            starter_code=data.get("starter_code", ""),
            solution=data.get("solution", ""),
            hints=_str_list(data.get("hints")),
        )


@dataclass
class Lesson:
    """A single lesson. Static course data, never mutated at runtime."""

    id: str
    title: str
    content: str
    key_points: list[str] = field(default_factory=list)
    exercise: Exercise | None = None
    narration_text: str = ""
    estimated_time: int = 0  # minutes
    skill: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "key_points": list(self.key_points),
            "exercise": self.exercise.to_dict() if self.exercise else None,
            "narration_text": self.narration_text,
            "estimated_time": self.estimated_time,
            "skill": self.skill,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Lesson:
        exercise = data.get("exercise")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            key_points=_str_list(data.get("key_points")),
            exercise=Exercise.from_dict(exercise) if exercise else None,
            narration_text=data.get("narration_text", ""),
            estimated_time=int(data.get("estimated_time", 0)),
            skill=data.get("skill", ""),
        )


@dataclass
class Course:
    """An ordered collection of lessons."""

    id: str
    title: str
    description: str = ""
    level: str = "beginner"
    duration: int = 0  # hours
    category: str = ""
    skill: str = ""
    lessons: list[Lesson] = field(default_factory=list)

    def get_lesson(self, lesson_id: str) -> Lesson | None:
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None

    def to_dict(self, include_lessons: bool = True) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "level": self.level,
            "duration": self.duration,
            "category": self.category,
            "skill": self.skill,
            "modules": len(self.lessons),
        }
        if include_lessons:
            result["lessons"] = [lesson.to_dict() for lesson in self.lessons]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Course:
        skill = data.get("skill", "")
        lessons = []
        for raw in data.get("lessons") or []:
            lesson = Lesson.from_dict(raw)
            if not lesson.skill:
                lesson.skill = skill
            lessons.append(lesson)
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            level=data.get("level", "beginner"),
            duration=int(data.get("duration", 0)),
            category=data.get("category", ""),
            skill=skill,
            lessons=lessons,
        )


@dataclass
class ContentSection:
    """A typed block of lesson content.

    Derived from Lesson.content on demand, never persisted.
    """

    id: str
    type: SectionType
    content: str
    level: int | None = None  # headings only
    language: str | None = None  # code blocks only
    audio_url: str | None = None

    @property
    def items(self) -> list[str]:
        """List item texts without their bullet/ordinal markers."""
        if self.type != "list":
            return []
        return [LIST_MARKER_PATTERN.sub("", line) for line in self.content.split("\n")]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "content": self.content,
        }
        if self.level is not None:
            result["level"] = self.level
        if self.language is not None:
            result["language"] = self.language
        if self.audio_url is not None:
            result["audio_url"] = self.audio_url
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentSection:
        return cls(
            id=data["id"],
            type=data["type"],
            content=data.get("content", ""),
            level=data.get("level"),
            language=data.get("language"),
            audio_url=data.get("audio_url"),
        )


# =============================================================================
# PROGRESS / COMMUNITY
# =============================================================================


@dataclass
class CourseProgress:
    """Per (user, course, lesson) progress row."""

    user_id: str
    course_id: str
    lesson_id: str
    code: str = ""
    completed: bool = False
    completion_time: str | None = None
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "course_id": self.course_id,
            "lesson_id": self.lesson_id,
            "code": self.code,
            "completed": self.completed,
            "completion_time": self.completion_time,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CourseProgress:
        return cls(
            user_id=data["user_id"],
            course_id=data["course_id"],
            lesson_id=data["lesson_id"],
            code=data.get("code") or "",
            completed=bool(data.get("completed", False)),
            completion_time=data.get("completion_time"),
            updated_at=data.get("updated_at") or "",
        )


@dataclass
class MentorProfile:
    """Mentorship offer published by a user."""

    user_id: str
    specialty: str
    category: str = ""
    bio: str = ""
    price: float = 0.0
    currency: str = "USD"
    session_length: int = 60  # minutes
    availability: str = ""
    rating: float = 0.0
    sessions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "specialty": self.specialty,
            "category": self.category,
            "bio": self.bio,
            "price": self.price,
            "currency": self.currency,
            "session_length": self.session_length,
            "availability": self.availability,
            "rating": self.rating,
            "sessions": self.sessions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MentorProfile:
        return cls(
            user_id=data["user_id"],
            specialty=data.get("specialty", ""),
            category=data.get("category") or "",
            bio=data.get("bio") or "",
            price=float(data.get("price") or 0),
            currency=data.get("currency") or "USD",
            session_length=int(data.get("session_length") or 60),
            availability=data.get("availability") or "",
            rating=float(data.get("rating") or 0),
            sessions=int(data.get("sessions") or 0),
        )


@dataclass
class Match:
    """A skill-swap match between two users."""

    user_id: str
    matched_user_id: str
    match_score: int
    status: str = "pending"  # pending | accepted | completed
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "matched_user_id": self.matched_user_id,
            "match_score": self.match_score,
            "status": self.status,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Match:
        return cls(
            user_id=data["user_id"],
            matched_user_id=data["matched_user_id"],
            match_score=int(data.get("match_score", 0)),
            status=data.get("status") or "pending",
            created_at=data.get("created_at") or "",
        )
