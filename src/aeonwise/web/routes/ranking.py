"""Leaderboard and rank tier endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends

from aeonwise.core.ranking import RANKS
from aeonwise.db.database import Database
from aeonwise.db.profiles_repository import list_leaderboard
from aeonwise.web.dependencies import get_database
from aeonwise.web.schemas import LeaderboardEntry, LeaderboardResponse, RankResponse

router = APIRouter(prefix="/api", tags=["ranking"])


@router.get("/ranking", response_model=LeaderboardResponse)
async def leaderboard(
    filter: Literal["all", "top10", "masters"] = "all",
    db: Database = Depends(get_database),
) -> LeaderboardResponse:
    """Profiles by points with 1-based positions."""
    entries = [LeaderboardEntry(**e) for e in list_leaderboard(db, filter)]
    return LeaderboardResponse(filter=filter, entries=entries, count=len(entries))


@router.get("/ranks", response_model=list[RankResponse])
async def ranks() -> list[RankResponse]:
    """The rank tiers, lowest first."""
    return [RankResponse(name=r.name, title=r.title, threshold=r.threshold) for r in RANKS]
