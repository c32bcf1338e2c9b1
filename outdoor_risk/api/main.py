"""
FastAPI Application

Main entry point for the outdoor risk web API.
"""

import logging
from typing import Dict

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from outdoor_risk.api.models.responses import ErrorResponse
from outdoor_risk.api.routes import activities, assessments, forecast, users
from outdoor_risk.errors import ActivityCatalogError, NotFoundError, ReadingError
from outdoor_risk.settings import configure_logging, get_settings

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Outdoor Activity Risk API",
    description="Activity-weighted weather risk scoring with recommendations and best time windows",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration - allow frontend to access API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(activities.router, prefix="/api", tags=["Activities"])
app.include_router(assessments.router, prefix="/api", tags=["Assessments"])
app.include_router(forecast.router, prefix="/api", tags=["Forecast"])
app.include_router(users.router, prefix="/api", tags=["Users"])


@app.get("/")
async def root() -> Dict[str, str]:
    """Root endpoint - API information."""
    return {
        "name": "Outdoor Activity Risk API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "outdoor-risk-api"}


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _format_errors(errors) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors
    )


# Global exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return _error_response(exc.status_code, str(exc.detail), str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", _format_errors(exc.errors()))


@app.exception_handler(ValidationError)
async def validation_error_handler(request, exc: ValidationError):
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", _format_errors(exc.errors()))


@app.exception_handler(ReadingError)
async def reading_error_handler(request, exc: ReadingError):
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid Reading", str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, "Not Found", str(exc))


@app.exception_handler(ActivityCatalogError)
async def catalog_error_handler(request, exc: ActivityCatalogError):
    logger.error("Activity catalog failed to load: %s", exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Activity Catalog Error", str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "outdoor_risk.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
