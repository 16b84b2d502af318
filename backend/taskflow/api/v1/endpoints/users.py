from fastapi import APIRouter, Depends
from typing import List

from taskflow.api.deps import get_user_service
from taskflow.models.user import User
from taskflow.modules.auth.dependencies import get_current_user
from taskflow.schemas.auth import UserProfileUpdate, UserResponse, UserSummary
from taskflow.services.user_service import UserService


router = APIRouter()


@router.get("", response_model=List[UserSummary])
async def list_users(
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service)
):
    """Every registered user, for the assignment picker"""
    return [UserSummary.from_model(user) for user in await users.list_users()]


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return UserResponse.from_model(current_user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    profile: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service)
):
    user = await users.update_profile(
        str(current_user.id),
        name=profile.name,
        email=profile.email
    )
    return UserResponse.from_model(user)
