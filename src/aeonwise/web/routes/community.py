"""Skill extraction, skill-swap matching and mentorship endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from aeonwise.core.matching import extract_skills, find_matches
from aeonwise.core.models import MentorProfile
from aeonwise.core.ranking import calculate_rank
from aeonwise.db.database import Database
from aeonwise.db.mentorship_repository import (
    MatchNotFoundError,
    complete_swap,
    get_mentor,
    list_matches,
    list_mentors,
    record_match,
    upsert_mentor_profile,
)
from aeonwise.db.profiles_repository import get_profile, list_profiles
from aeonwise.web.dependencies import get_database
from aeonwise.web.schemas import (
    MatchEntry,
    MatchListResponse,
    MentorListResponse,
    MentorResponse,
    MentorUpdate,
    SavedMatchResponse,
    SkillsRequest,
    SkillsResponse,
    SwapCompletionRequest,
    SwapCompletionResponse,
)

router = APIRouter(prefix="/api", tags=["community"])


def _require_profile(db: Database, user_id: str):
    profile = get_profile(db, user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile '{user_id}' not found",
        )
    return profile


def _mentor_response(db: Database, mentor: MentorProfile) -> MentorResponse:
    profile = get_profile(db, mentor.user_id)
    return MentorResponse(
        **mentor.to_dict(), username=profile.username if profile else ""
    )


@router.post("/skills/extract", response_model=SkillsResponse)
async def skills_from_text(request: SkillsRequest) -> SkillsResponse:
    """Known skills mentioned in free text."""
    return SkillsResponse(skills=extract_skills(request.text))


# =============================================================================
# MATCHES
# =============================================================================


def _matches_for(db: Database, user_id: str, limit: int):
    seeker = _require_profile(db, user_id)
    return find_matches(seeker, list_profiles(db), limit=limit)


@router.get("/matches/{user_id}", response_model=MatchListResponse)
async def matches(
    user_id: str,
    limit: int = Query(5, ge=1, le=50),
    db: Database = Depends(get_database),
) -> MatchListResponse:
    """Best skill-swap partners among stored profiles."""
    entries = [
        MatchEntry(**m.profile.to_dict(), match_score=m.match_score)
        for m in _matches_for(db, user_id, limit)
    ]
    return MatchListResponse(user_id=user_id, matches=entries, count=len(entries))


@router.post("/matches/{user_id}", response_model=list[SavedMatchResponse])
async def save_matches(
    user_id: str,
    limit: int = Query(5, ge=1, le=50),
    db: Database = Depends(get_database),
) -> list[SavedMatchResponse]:
    """Compute matches and store them as pending."""
    for m in _matches_for(db, user_id, limit):
        record_match(db, user_id, m.profile.id, m.match_score)
    return [SavedMatchResponse(**m.to_dict()) for m in list_matches(db, user_id)]


@router.get("/matches/{user_id}/saved", response_model=list[SavedMatchResponse])
async def saved_matches(
    user_id: str, db: Database = Depends(get_database)
) -> list[SavedMatchResponse]:
    """Matches previously stored for a user."""
    _require_profile(db, user_id)
    return [SavedMatchResponse(**m.to_dict()) for m in list_matches(db, user_id)]


@router.post(
    "/matches/{user_id}/{matched_user_id}/complete",
    response_model=SwapCompletionResponse,
)
async def complete_skill_swap(
    user_id: str,
    matched_user_id: str,
    request: SwapCompletionRequest,
    db: Database = Depends(get_database),
) -> SwapCompletionResponse:
    """Close a skill swap and award points for the skills shared."""
    try:
        total = complete_swap(db, user_id, matched_user_id, request.skills_shared)
    except MatchNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return SwapCompletionResponse(
        user_id=user_id,
        matched_user_id=matched_user_id,
        total_points=total,
        rank=calculate_rank(total),
    )


# =============================================================================
# MENTORS
# =============================================================================


@router.get("/mentors", response_model=MentorListResponse)
async def mentors(
    category: str | None = None, db: Database = Depends(get_database)
) -> MentorListResponse:
    """Published mentorship offers, best rated first."""
    items = [_mentor_response(db, m) for m in list_mentors(db, category)]
    return MentorListResponse(mentors=items, count=len(items))


@router.get("/mentors/{user_id}", response_model=MentorResponse)
async def read_mentor(user_id: str, db: Database = Depends(get_database)) -> MentorResponse:
    mentor = get_mentor(db, user_id)
    if mentor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Mentor '{user_id}' not found",
        )
    return _mentor_response(db, mentor)


@router.put("/mentors/{user_id}", response_model=MentorResponse)
async def write_mentor(
    user_id: str, update: MentorUpdate, db: Database = Depends(get_database)
) -> MentorResponse:
    """Publish or replace a user's mentorship offer.

    Rating and session count are kept from the existing offer.
    """
    _require_profile(db, user_id)
    existing = get_mentor(db, user_id)

    mentor = MentorProfile(
        user_id=user_id,
        rating=existing.rating if existing else 0.0,
        sessions=existing.sessions if existing else 0,
        **update.model_dump(),
    )
    upsert_mentor_profile(db, mentor)
    return _mentor_response(db, mentor)
