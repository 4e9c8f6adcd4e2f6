"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    MiraError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from modules.auth.exceptions import (
    ChallengeError,
    InvalidTransitionError,
    TransitionInProgressError,
)
from .models import ErrorResponse
from .routes import health, users
from modules.chat.routes import router as chat_router

logger = logging.getLogger(__name__)

# Most specific first
STATUS_CODES: list[tuple[type[MiraError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (AuthenticationError, 401),
    (AuthorizationError, 401),
    (ChallengeError, 400),
    (InvalidTransitionError, 409),
    (TransitionInProgressError, 409),
    (TransportError, 503),
    (ExternalServiceError, 502),
]


def status_code_for(error: MiraError) -> int:
    """HTTP status for a domain error."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def mira_error_handler(request: Request, exc: MiraError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=status_code, content=body.model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    yield
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Companion chat API for Mira",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(MiraError, mira_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(chat_router, prefix="/api/chat", tags=["chat"])

    return app


# Application instance for uvicorn
app = create_app()
