"""Skill-swap matching.

A candidate scores one point for every seeker skill that appears in one
of their learning goals, and one point for every seeker goal that
appears in one of their skills (case-insensitive substring match).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from aeonwise.core.models import Profile

DEFAULT_MATCH_LIMIT = 5

# Vocabulary recognised by extract_skills, in output order
SKILL_VOCABULARY = [
    "javascript", "python", "react", "node", "design", "marketing",
    "data", "machine learning", "ai", "ui", "ux", "writing", "teaching",
    "project management", "leadership", "communication", "angular",
    "vue", "typescript", "sql", "database", "cloud", "aws", "azure",
    "devops", "music", "art", "public speaking", "coaching", "analytics",
]

_WORD_SPLIT = re.compile(r"[\s,.]+")


@dataclass
class ScoredMatch:
    """A candidate profile with its match score."""

    profile: Profile
    match_score: int

    def to_dict(self) -> dict:
        result = self.profile.to_dict()
        result["match_score"] = self.match_score
        return result


def extract_skills(text: str) -> list[str]:
    """Pick known skills out of free text.

    A vocabulary entry counts when any word of the text contains it.
    Multi-word entries can therefore only match as a single word, which
    mirrors the keyword scan the profile importer has always used.
    """
    words = [w for w in _WORD_SPLIT.split(text.lower()) if w]
    found = [skill for skill in SKILL_VOCABULARY if any(skill in w for w in words)]
    return [" ".join(part.capitalize() for part in skill.split(" ")) for skill in found]


def match_score(skills: list[str], learning_goals: list[str], candidate: Profile) -> int:
    """Score how well a candidate complements a seeker's skills and goals."""
    score = 0
    candidate_goals = [g.lower() for g in candidate.learning_goals]
    candidate_skills = [s.lower() for s in candidate.skills]

    for skill in skills:
        if any(skill.lower() in goal for goal in candidate_goals):
            score += 1
    for goal in learning_goals:
        if any(goal.lower() in skill for skill in candidate_skills):
            score += 1
    return score


def find_matches(
    seeker: Profile,
    candidates: list[Profile],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> list[ScoredMatch]:
    """Best skill-swap partners for a seeker, highest score first.

    The seeker and zero-score candidates are dropped; ties keep the
    candidates' input order.
    """
    if limit < 1:
        return []
    scored = [
        ScoredMatch(profile=c, match_score=match_score(seeker.skills, seeker.learning_goals, c))
        for c in candidates
        if c.id != seeker.id
    ]
    scored = [m for m in scored if m.match_score > 0]
    scored.sort(key=lambda m: m.match_score, reverse=True)
    return scored[:limit]
