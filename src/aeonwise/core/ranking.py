"""Points and rank model.

Scores a profile from its counted fields and maps a score onto one of
six named tiers. Pure functions only: nothing here persists points or
checks that stored points match a recomputed score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aeonwise.core.models import Profile

# Scoring weights
POINTS_PER_SKILL = 10
POINTS_PER_LEARNING_GOAL = 5
POINTS_PER_WORK_EXPERIENCE = 50
POINTS_PER_PROJECT = 30
POINTS_PER_CERTIFICATION = 40
POINTS_FOR_BIO = 50
POINTS_PER_ACHIEVEMENT = 10

# Awarded once per lesson on first completion
LESSON_COMPLETION_POINTS = 50


@dataclass(frozen=True)
class Rank:
    """A gamification tier."""

    name: str
    title: str
    threshold: int


# Ascending, contiguous thresholds
RANKS: tuple[Rank, ...] = (
    Rank("starspark", "Starspark", 0),
    Rank("nebula_novice", "Nebula Novice", 251),
    Rank("astral_apprentice", "Astral Apprentice", 501),
    Rank("comet_crafter", "Comet Crafter", 801),
    Rank("galactic_guide", "Galactic Guide", 1201),
    Rank("cosmic_sage", "Cosmic Sage", 1601),
)

RANK_NAMES: tuple[str, ...] = tuple(r.name for r in RANKS)


@dataclass(frozen=True)
class NextRank:
    """Next tier above a score and the points still missing."""

    next_rank: str
    points_needed: int


def calculate_points(profile: Profile) -> int:
    """Score a profile from its collection sizes and bio.

    Order-independent: only list lengths and bio presence matter.
    """
    achievements = sum(len(w.achievements) for w in profile.work_experience)
    achievements += sum(len(p.achievements) for p in profile.projects)

    points = POINTS_PER_SKILL * len(profile.skills)
    points += POINTS_PER_LEARNING_GOAL * len(profile.learning_goals)
    points += POINTS_PER_WORK_EXPERIENCE * len(profile.work_experience)
    points += POINTS_PER_PROJECT * len(profile.projects)
    points += POINTS_PER_CERTIFICATION * len(profile.certifications)
    if profile.bio and profile.bio.strip():
        points += POINTS_FOR_BIO
    points += POINTS_PER_ACHIEVEMENT * achievements
    return points


def get_rank(name: str) -> Rank | None:
    """Look up a tier by name."""
    for rank in RANKS:
        if rank.name == name:
            return rank
    return None


def calculate_rank(points: int) -> str:
    """Return the highest tier whose threshold is <= points."""
    for rank in reversed(RANKS):
        if points >= rank.threshold:
            return rank.name
    return RANKS[0].name


def points_to_next_rank(points: int) -> NextRank:
    """Return the next tier above points and how many points are missing.

    At the top tier the next rank is the top tier itself with 0 needed.
    Negative totals count as 0.
    """
    points = max(points, 0)
    for rank in RANKS:
        if points < rank.threshold:
            return NextRank(next_rank=rank.name, points_needed=rank.threshold - points)
    return NextRank(next_rank=RANKS[-1].name, points_needed=0)


def rank_progress(points: int) -> float:
    """Percentage of the way from the current tier to the next (0-100)."""
    current = get_rank(calculate_rank(points))
    index = RANKS.index(current)
    if index == len(RANKS) - 1:
        return 100.0
    floor = max(current.threshold, 0)
    span = RANKS[index + 1].threshold - floor
    done = max(points - floor, 0)
    return round(min(done / span, 1.0) * 100, 1)
