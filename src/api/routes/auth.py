"""
Authentication endpoints.

The platform signs users in; this endpoint only maps the signed-in
principal to our user record, creating it on first visit.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ...core.catalog import User
from ..dependencies import UserServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


class UserResponse(BaseModel):
    """The current user's record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="User identifier derived from the principal")
    username: str = Field(description="Platform user name")
    display_name: str = Field(alias="displayName", description="Display name")
    email: str = Field("", description="Email, when the platform provides one")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            email=user.email,
        )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the current user",
    description="Resolve the signed-in caller, creating their user record if needed",
)
async def get_current_user(request: Request, service: UserServiceDep) -> UserResponse:
    try:
        user = await service.resolve_current_user(request.headers)
    except Exception as e:
        logger.error("Error fetching user data", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user data"
        )

    return UserResponse.from_user(user)
