import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from saaskit.errors import (
    AccessDeniedError,
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    SessionExpiredError,
    StorageError,
    ValidationError,
)
from saaskit.web.cookies import clear_session_cookie

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    response = create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)
    if isinstance(exc, SessionExpiredError):
        # The presented cookie is dead; stop the client from replaying it
        clear_session_cookie(response)
    return response


async def service_error_handler(_: Request, exc: Exception) -> Response:
    """Handle backend and provider failures (500) without leaking details."""
    if isinstance(exc, StorageError):
        logger.exception("storage_error", error=str(exc))
    elif isinstance(exc, ExternalServiceError):
        logger.exception("external_service_error", error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
