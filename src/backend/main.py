"""
Agora Backend Application

Topic polling with cached, verification-aware results.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.exceptions import (
    InvalidLinkError,
    InvalidVoteConfigError,
    InvalidVotePayloadError,
    SuggestionAlreadyReviewedError,
    SuggestionNotFoundError,
    TopicClosedError,
    TopicNotFoundError,
    VerificationRequiredError,
    VoteTypeNotFoundError,
    VotingError,
)
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)

# Domain error -> HTTP status
ERROR_STATUS_CODES: dict[type[VotingError], int] = {
    TopicNotFoundError: status.HTTP_404_NOT_FOUND,
    SuggestionNotFoundError: status.HTTP_404_NOT_FOUND,
    VoteTypeNotFoundError: status.HTTP_404_NOT_FOUND,
    TopicClosedError: status.HTTP_409_CONFLICT,
    SuggestionAlreadyReviewedError: status.HTTP_409_CONFLICT,
    VerificationRequiredError: status.HTTP_403_FORBIDDEN,
    InvalidVotePayloadError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidVoteConfigError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidLinkError: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await create_start_app_handler(app)()
    yield
    # Shutdown
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Topic polling with cached, verification-aware results",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - processed in reverse)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    application.add_middleware(RequestContextMiddleware)

    # Include routers
    application.include_router(api_v1_router, prefix="/api/v1")

    @application.exception_handler(VotingError)
    async def voting_exception_handler(request: Request, exc: VotingError) -> JSONResponse:
        """Translate domain errors raised by the services into HTTP responses."""
        status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
        logger.info(
            "request_rejected",
            error_type=type(exc).__name__,
            status_code=status_code,
            detail=str(exc),
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler to catch unhandled exceptions.

        Persistence failures end up here; they are logged and answered with
        a structured 500 so CORS headers are still applied.
        """
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_type": type(exc).__name__ if settings.DEBUG else "InternalServerError",
            },
        )

    return application


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "agora-api"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }
