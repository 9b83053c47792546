from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Query, Response
from fastapi.responses import RedirectResponse

from saaskit.errors import ValidationError
from saaskit.utils import new_token
from saaskit.web.cookies import (
    OAUTH_STATE_COOKIE_NAME,
    clear_oauth_state_cookie,
    clear_session_cookie,
    set_oauth_state_cookie,
    set_session_cookie,
)
from saaskit.web.deps import AppDep, SessionDep, require_same_origin
from saaskit.web.openapi import ErrorResponse, SuccessResponse
from saaskit.web.routers.profile import UserResponse

router = APIRouter(tags=["auth"])


@router.get(
    "/oauth/google",
    summary="Start Google sign-in",
    description="Redirect to Google's consent screen. A short-lived state cookie guards the callback.",
    operation_id="startGoogleLogin",
    status_code=302,
    response_class=RedirectResponse,
)
async def google_login(app: AppDep) -> RedirectResponse:
    state = new_token()
    response = RedirectResponse(app.get_authorization_url(state), status_code=302)
    set_oauth_state_cookie(response, state, secure=app.config.is_production)
    return response


@router.get(
    "/oauth/google/callback",
    summary="Complete Google sign-in",
    description="Exchange the authorization code, create the user on first sign-in and start a session.",
    operation_id="googleCallback",
    status_code=302,
    response_class=RedirectResponse,
    responses={
        302: {"description": "Signed in, redirected to the dashboard"},
        400: {"model": ErrorResponse, "description": "Missing or mismatched OAuth state"},
        500: {"model": ErrorResponse, "description": "Authentication failed"},
    },
)
async def google_callback(
    app: AppDep,
    code: Annotated[str, Query(min_length=1, description="Authorization code")],
    state: Annotated[str | None, Query(description="OAuth state echoed by Google")] = None,
    expected_state: Annotated[str | None, Cookie(alias=OAUTH_STATE_COOKIE_NAME)] = None,
) -> RedirectResponse:
    if not state or not expected_state or state != expected_state:
        raise ValidationError("Invalid OAuth state")

    session_id = await app.login_with_google(code)

    response = RedirectResponse("/dashboard", status_code=302)
    set_session_cookie(response, session_id, secure=app.config.is_production)
    clear_oauth_state_cookie(response)
    return response


@router.post(
    "/api/auth/logout",
    summary="End session",
    description="Destroy the current session and clear the session cookie.",
    operation_id="logout",
    dependencies=[Depends(require_same_origin)],
    responses={
        200: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, session: SessionDep, response: Response) -> SuccessResponse:
    await app.logout(session)
    clear_session_cookie(response)
    return SuccessResponse(success=True)


@router.post(
    "/api/auth/refresh",
    summary="Refresh session",
    description="Extend the session by its full lifetime and resync it with the latest user data.",
    operation_id="refreshSession",
    dependencies=[Depends(require_same_origin)],
    responses={
        200: {"description": "Session refreshed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def refresh(app: AppDep, session: SessionDep, response: Response) -> UserResponse:
    refreshed, user = await app.refresh_session(session)
    set_session_cookie(response, refreshed.id, max_age=refreshed.remaining_seconds(), secure=app.config.is_production)
    return UserResponse(user=user)
