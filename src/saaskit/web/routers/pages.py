from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from saaskit.app import DashboardView
from saaskit.web.cookies import clear_session_cookie, read_session_cookie
from saaskit.web.deps import AppDep, SessionDep
from saaskit.web.openapi import ErrorResponse

router = APIRouter(tags=["pages"])


class LandingResponse(BaseModel):
    """Public landing payload for signed-out visitors."""

    message: str = Field(..., description="Greeting")
    login_url: str = Field(..., description="Where to start Google sign-in")


@router.get(
    "/",
    summary="Landing",
    description="Redirect signed-in users to the dashboard; otherwise describe how to sign in.",
    operation_id="landing",
    response_model=LandingResponse,
    responses={302: {"description": "Valid session, redirected to the dashboard"}},
)
async def landing(request: Request, app: AppDep) -> JSONResponse | RedirectResponse:
    session_cookie = read_session_cookie(request)
    if session_cookie and await app.get_session_user(session_cookie) is not None:
        return RedirectResponse("/dashboard", status_code=302)

    response = JSONResponse(LandingResponse(message="Welcome", login_url="/oauth/google").model_dump())
    if session_cookie:
        clear_session_cookie(response)
    return response


@router.get(
    "/dashboard",
    summary="Dashboard",
    description="Current user with subscription state. Redirects to the landing page if the user no longer exists.",
    operation_id="dashboard",
    response_model=DashboardView,
    responses={
        302: {"description": "User no longer exists"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def dashboard(app: AppDep, session: SessionDep) -> DashboardView | RedirectResponse:
    view = await app.get_dashboard(session)
    if view is None:
        return RedirectResponse("/", status_code=302)
    return view
