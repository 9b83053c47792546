from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from saaskit.web.cookies import SESSION_COOKIE_NAME


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="SaaSKit API",
            version="0.1.0",
            summary="Google sign-in, sessions, subscriptions and account management",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE_NAME,
                "description": "Server-side session id issued after Google sign-in",
            },
        }

        # Apply security globally (will be overridden for public endpoints)
        openapi_schema["security"] = [{"SessionCookie": []}]

        public_endpoints = {
            ("GET", "/"),
            ("GET", "/health"),
            ("GET", "/oauth/google"),
            ("GET", "/oauth/google/callback"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    # Mark as public endpoint (no security required)
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid or expired session", "type": "authentication_error"},
                {"message": "User not found", "type": "not_found"},
                {"message": "Stripe not configured", "type": "validation_error"},
            ]
        }
    }


class SuccessResponse(BaseModel):
    """Acknowledgement for operations without a payload."""

    success: bool = Field(True, description="Whether the operation succeeded")
    message: str | None = Field(None, description="Optional human-readable message")
