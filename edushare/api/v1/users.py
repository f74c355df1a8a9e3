"""User directory REST API routes - V1."""

from typing import List
from fastapi import APIRouter, HTTPException, Depends

from ...models.user import UserResponse, UpsertUserRequest
from ...db import UserRepository
from ...db.database_models import UserDO
from .deps import get_user_repo

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _to_response(user: UserDO) -> UserResponse:
    return UserResponse(
        email=user.email,
        full_name=user.full_name,
        verified=user.verified,
        created_at=user.created_at
    )


@router.get("", response_model=List[UserResponse])
async def list_users(repo: UserRepository = Depends(get_user_repo)):
    """List all users."""
    return [_to_response(u) for u in repo.list_all()]


@router.post("", response_model=UserResponse)
async def upsert_user(
    request: UpsertUserRequest,
    repo: UserRepository = Depends(get_user_repo)
):
    """Create a user or update an existing one."""
    user = UserDO(email=request.email, full_name=request.full_name, verified=request.verified)

    if not repo.upsert(user):
        raise HTTPException(status_code=500, detail="Failed to save user")

    return _to_response(repo.get(request.email) or user)


@router.get("/{email}", response_model=UserResponse)
async def get_user(
    email: str,
    repo: UserRepository = Depends(get_user_repo)
):
    """Get a user by email."""
    user = repo.get(email)

    if not user:
        raise HTTPException(status_code=404, detail=f"User not found: {email}")

    return _to_response(user)
