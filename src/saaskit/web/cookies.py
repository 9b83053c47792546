"""Session cookie encoding.

Set-Cookie values are built by hand so attribute order and casing stay fixed:
`app_session=<id>; Path=/; HttpOnly; Max-Age=<n>; SameSite=Lax[; Secure]`.
"""

from fastapi import Request, Response
from starlette.requests import cookie_parser

from saaskit.core.modules.session.models import SESSION_DURATION

SESSION_COOKIE_NAME = "app_session"
SESSION_MAX_AGE = int(SESSION_DURATION.total_seconds())

OAUTH_STATE_COOKIE_NAME = "app_oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


def encode_cookie(name: str, value: str, max_age: int, secure: bool = False) -> str:
    parts = [f"{name}={value}", "Path=/", "HttpOnly", f"Max-Age={max_age}", "SameSite=Lax"]
    # Plain HTTP must keep working outside production
    if secure:
        parts.append("Secure")
    return "; ".join(parts)


def encode_session_cookie(session_id: str, max_age: int = SESSION_MAX_AGE, secure: bool = False) -> str:
    return encode_cookie(SESSION_COOKIE_NAME, session_id, max_age, secure)


def encode_cleared_session_cookie() -> str:
    return encode_cookie(SESSION_COOKIE_NAME, "", 0)


def decode_session_cookie(cookie_header: str | None) -> str | None:
    """Session id from a Cookie header, or None if absent or empty."""
    if not cookie_header:
        return None
    return cookie_parser(cookie_header).get(SESSION_COOKIE_NAME) or None


def read_session_cookie(request: Request) -> str | None:
    return decode_session_cookie(request.headers.get("cookie"))


def set_session_cookie(response: Response, session_id: str, max_age: int = SESSION_MAX_AGE, secure: bool = False) -> None:
    response.headers.append("set-cookie", encode_session_cookie(session_id, max_age, secure))


def clear_session_cookie(response: Response) -> None:
    response.headers.append("set-cookie", encode_cleared_session_cookie())


def set_oauth_state_cookie(response: Response, state: str, secure: bool = False) -> None:
    response.headers.append("set-cookie", encode_cookie(OAUTH_STATE_COOKIE_NAME, state, OAUTH_STATE_MAX_AGE, secure))


def clear_oauth_state_cookie(response: Response) -> None:
    response.headers.append("set-cookie", encode_cookie(OAUTH_STATE_COOKIE_NAME, "", 0))
