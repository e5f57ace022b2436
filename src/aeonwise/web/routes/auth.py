"""Username/password sign-up and sign-in endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aeonwise.db.database import Database
from aeonwise.db.users_repository import (
    USERNAME_TAKEN_MESSAGE,
    authenticate_user,
    register_user,
)
from aeonwise.web.dependencies import get_database
from aeonwise.web.schemas import AuthResponse, CredentialsRequest, ProfileResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    credentials: CredentialsRequest, db: Database = Depends(get_database)
) -> AuthResponse:
    """Create an account and its empty profile."""
    result = register_user(db, credentials.username, credentials.password)

    if not result.success:
        code = (
            status.HTTP_409_CONFLICT
            if result.message == USERNAME_TAKEN_MESSAGE
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=result.message)

    return AuthResponse(
        user_id=result.user["id"],
        username=result.user["username"],
        profile=ProfileResponse.from_profile(result.profile),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: CredentialsRequest, db: Database = Depends(get_database)
) -> AuthResponse:
    """Check credentials and return the user's profile."""
    result = authenticate_user(db, credentials.username, credentials.password)

    if not result.success or result.profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.message or "Invalid username or password",
        )

    return AuthResponse(
        user_id=result.user["id"],
        username=result.user["username"],
        profile=ProfileResponse.from_profile(result.profile),
    )
