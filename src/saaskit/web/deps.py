from typing import Annotated, cast

from fastapi import Depends, Request

from saaskit.app import App
from saaskit.core.modules.session.models import Session
from saaskit.errors import AccessDeniedError, AuthenticationError, SessionExpiredError
from saaskit.web.cookies import read_session_cookie

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_current_session(request: Request, app: Annotated[App, Depends(get_app)]) -> Session:
    """Resolve the session cookie to a live session or reject the request.

    A missing cookie is rejected without touching the store. A cookie that
    does not resolve raises SessionExpiredError so the response clears it.
    """
    session_id = read_session_cookie(request)
    if not session_id:
        raise AuthenticationError("No session found")

    session = await app.validate_session(session_id)
    if session is None:
        raise SessionExpiredError
    return session


async def require_same_origin(request: Request, app: Annotated[App, Depends(get_app)]) -> None:
    """Reject state-changing requests whose Origin header is not one of ours."""
    if request.method not in UNSAFE_METHODS:
        return
    origin = request.headers.get("origin")
    if origin is not None and origin.rstrip("/") not in app.config.allowed_origins:
        raise AccessDeniedError("Origin not allowed")


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionDep = Annotated[Session, Depends(get_current_session)]
