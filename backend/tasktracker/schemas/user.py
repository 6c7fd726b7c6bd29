"""User Schemas — read-only public profile of the authenticated user."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class UserProfileResponse(BaseModel):
    user: UserProfile
