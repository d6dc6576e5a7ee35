"""ReelCache FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from reelcache.api import router
from reelcache.config import load_settings
from reelcache.models import AppError, AppException, ErrorCode
from reelcache.services import CDNPolicies, apply_cache_headers, get_cache_service

settings = load_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup - warm the process-wide cache instance
    get_cache_service()
    yield
    # Shutdown - the cache dies with the process


app = FastAPI(
    title="ReelCache API",
    description="Response caching for the film streaming catalog",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers
def error_response(status_code: int, error: AppError) -> JSONResponse:
    """Build an error envelope that downstream caches must not keep."""
    response = JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error.model_dump(mode="json")},
    )
    apply_cache_headers(response, CDNPolicies.NO_CACHE)
    return response


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle errors raised by route handlers."""
    return error_response(exc.status_code, exc.error)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle malformed query parameters, headers and bodies."""
    return error_response(
        422,
        AppError(
            code=ErrorCode.VALIDATION_ERROR,
            message=str(exc.errors()),
            user_message="Invalid request format. Please check your input.",
        ),
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    return error_response(
        422,
        AppError(
            code=ErrorCode.VALIDATION_ERROR,
            message=str(exc),
            user_message="Invalid request format. Please check your input.",
        ),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"[API] Unhandled error on {request.url.path}")
    return error_response(
        500,
        AppError(
            code=ErrorCode.API_ERROR,
            message=str(exc),
            user_message="Something went wrong. Please try again.",
        ),
    )


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check(response: Response):
    """Health check endpoint with local cache statistics."""
    apply_cache_headers(response, CDNPolicies.NO_CACHE)
    return {
        "status": "healthy",
        "time": datetime.now(timezone.utc).isoformat(),
        "cache": get_cache_service().stats().model_dump(),
    }
