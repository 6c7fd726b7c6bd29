"""User Routes — read-only profile of the authenticated caller."""

from fastapi import APIRouter, Depends

from tasktracker.api.dependencies import get_current_user
from tasktracker.models.user import User
from tasktracker.schemas.user import UserProfile, UserProfileResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=UserProfileResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return UserProfileResponse(user=UserProfile.model_validate(user))
