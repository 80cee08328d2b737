"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Easier to test (can create multiple instances)

2. Lifespan Events
   - startup: log configuration, warm up the optional stats cache
   - shutdown: close the Redis connection

3. Middleware Stack
   - Rate limiting (slowapi)
   - CORS: Allow cross-origin requests from the web client

4. Exception Handlers
   - Every error leaves the API as {"error": "<message>"}
   - Domain errors carry their own status code
   - Database and unexpected errors are logged and reported as 500
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewhub.config import get_settings
from reviewhub.exceptions import ReviewHubError
from reviewhub.routers import (
    auth_router,
    categories_router,
    companies_router,
    reviews_router,
    subcategories_router,
)
from reviewhub.services.cache import close_redis_connection, get_cache_stats, get_redis_client
from reviewhub.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield: Runs on startup
    Code after yield: Runs on shutdown
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}, debug: {settings.debug}")
    logger.info(f"API version: {settings.api_version}")

    if settings.stats_cache_enabled:
        if get_redis_client():
            logger.info("Rating stats cache enabled")
        else:
            logger.warning("Redis unavailable - rating stats computed on every request")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    close_redis_connection()


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """The single error body shape used by every handler."""
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## ReviewHub API

Customer reviews of companies, organized by category.

### Features
- **Catalog**: Categories, subcategories and companies
- **Reviews**: One review per user per company, 1-5 stars
- **Ratings**: Averages and star breakdowns computed from live data
- **Discovery**: Best companies by category, curated review samples,
  shuffled review browsing

### Authentication
Write endpoints need a bearer token from `/api/v1/auth/login` or
`/api/v1/auth/register`.
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    # Attach the limiter to the app state so it can be accessed by decorators
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(ReviewHubError)
    async def domain_exception_handler(
        request: Request,
        exc: ReviewHubError,
    ) -> JSONResponse:
        """Render service errors with their own status code."""
        if exc.status_code >= 500:
            logger.error(f"Domain error on {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Authentication failures and unknown routes, in the common error shape."""
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """
        Request body/query validation failures.

        Reported as 400 with the first message up front and the full list
        under "details".
        """
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        details = [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in errors
        ]
        return error_response(400, message, details=details)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """
        Handle SQLAlchemy database errors.

        Logs the actual error for debugging while hiding details from users.
        """
        logger.error(f"Database error: {exc}")
        return error_response(500, "A database error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return error_response(500, str(exc))
        return error_response(500, "An internal error occurred.")

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    # prefix="/api/v1" creates versioned URLs: /api/v1/companies, /api/v1/reviews
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(categories_router, prefix=api_prefix)
    app.include_router(subcategories_router, prefix=api_prefix)
    app.include_router(companies_router, prefix=api_prefix)
    app.include_router(reviews_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and healthy.",
    )
    async def health_check() -> dict:
        """
        Health check endpoint for load balancers and monitoring.

        Returns API status including cache connectivity and rate limiting.
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "cache": get_cache_stats(),
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn reviewhub.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# python -m reviewhub.main
# In production, use: uvicorn reviewhub.main:app --host 0.0.0.0 --port 5000

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reviewhub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
