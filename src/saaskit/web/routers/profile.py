from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from saaskit.core.modules.user.models import ProfileUpdate, UserView
from saaskit.web.deps import AppDep, SessionDep, require_same_origin
from saaskit.web.openapi import ErrorResponse

router = APIRouter(prefix="/api", tags=["profile"], dependencies=[Depends(require_same_origin)])


class UserResponse(BaseModel):
    """Wrapper for a single user."""

    user: UserView = Field(..., description="User profile")


class UpdateProfileRequest(ProfileUpdate):
    """Request to update the current user's profile. Omitted fields are unchanged."""

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Ada Lovelace", "given_name": "Ada", "family_name": "Lovelace"}],
        }
    }


@router.get(
    "/me",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def get_me(app: AppDep, session: SessionDep) -> UserResponse:
    return UserResponse(user=await app.get_profile(session))


@router.patch(
    "/me",
    summary="Update current user profile",
    description="Update name fields of the currently authenticated user.",
    operation_id="updateCurrentUser",
    responses={
        200: {"description": "Updated profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
        422: {"description": "Invalid request body"},
    },
)
async def update_me(request: UpdateProfileRequest, app: AppDep, session: SessionDep) -> UserResponse:
    return UserResponse(user=await app.update_profile(session, request))
