import secrets
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from saaskit.app import App
from saaskit.config import Config
from saaskit.errors import ExternalServiceError, StorageError, UserError
from saaskit.web.error_handlers import general_exception_handler, service_error_handler, user_error_handler
from saaskit.web.openapi import set_custom_openapi
from saaskit.web.routers import (
    account_router,
    auth_router,
    pages_router,
    profile_router,
    subscription_router,
)

REQUEST_ID_HEADER = "X-Request-ID"


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="SaaS Kit API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )
    # Available before startup as well, handlers read it per request
    app.state.app = app_instance

    # Add CORS middleware for frontend development
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Give every request an id and bind it into the log context."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(8)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(pages_router)
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(subscription_router)
    app.include_router(account_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(StorageError, service_error_handler)
    app.add_exception_handler(ExternalServiceError, service_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
