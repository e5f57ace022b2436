"""Profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aeonwise.db.database import Database
from aeonwise.db.profiles_repository import (
    DuplicateUsernameError,
    ProfileNotFoundError,
    get_points_history,
    get_profile,
    update_profile,
)
from aeonwise.web.dependencies import get_database
from aeonwise.web.schemas import PointsHistoryEntry, ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def _not_found(profile_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Profile '{profile_id}' not found",
    )


@router.get("/{profile_id}", response_model=ProfileResponse)
async def read_profile(profile_id: str, db: Database = Depends(get_database)) -> ProfileResponse:
    """Get a profile with its points, rank and next rank."""
    profile = get_profile(db, profile_id)
    if profile is None:
        raise _not_found(profile_id)
    return ProfileResponse.from_profile(profile)


@router.patch("/{profile_id}", response_model=ProfileResponse)
async def patch_profile(
    profile_id: str,
    update: ProfileUpdate,
    db: Database = Depends(get_database),
) -> ProfileResponse:
    """Update profile fields; points are recomputed from the result."""
    try:
        profile = update_profile(db, profile_id, **update.to_fields())
    except ProfileNotFoundError:
        raise _not_found(profile_id)
    except DuplicateUsernameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ProfileResponse.from_profile(profile)


@router.get("/{profile_id}/points-history", response_model=list[PointsHistoryEntry])
async def points_history(
    profile_id: str, db: Database = Depends(get_database)
) -> list[PointsHistoryEntry]:
    """Points ledger for a profile, newest first."""
    if get_profile(db, profile_id) is None:
        raise _not_found(profile_id)
    return [PointsHistoryEntry(**entry) for entry in get_points_history(db, profile_id)]
