"""
PRISMA Studio Main Application
FastAPI application with error handling and middleware.
"""

import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from prisma_studio.core.config import get_settings
from prisma_studio.core.credentials import get_api_key_config
from prisma_studio.core.logging import configure_logging, get_logger, set_correlation_id
from prisma_studio.core.errors import ErrorCode, ErrorResponse, StudioException
from prisma_studio.features.production.handlers import router as production_router
from prisma_studio.features.settings.handlers import router as settings_router


APP_VERSION = "1.0.0"

# Configure logging on module import
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "application_startup",
        environment=settings.environment,
        debug=settings.debug,
        api_key_configured=get_api_key_config().is_configured,
    )

    yield

    logger.info("application_shutdown")


app = FastAPI(
    title="PRISMA Studio Production Engine",
    description="Script-to-storyboard production package service",
    version=APP_VERSION,
    lifespan=lifespan
)


# Middleware for correlation IDs
@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to each request."""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    set_correlation_id(correlation_id)

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id

    return response


@app.exception_handler(StudioException)
async def studio_exception_handler(request: Request, exc: StudioException):
    """Handle custom PRISMA Studio exceptions."""
    logger.error(
        "studio_exception",
        code=exc.code,
        message=exc.message,
        details=exc.details,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json")
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(
        "unhandled_exception",
        error=str(exc),
        path=request.url.path
    )

    error_response = ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        details={"error": str(exc)} if get_settings().debug else None
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json")
    )


@app.get("/health")
async def health_check():
    """Liveness plus credential status."""
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "version": APP_VERSION,
        "environment": settings.environment,
        "checks": {
            "api_key": "configured" if get_api_key_config().is_configured else "missing"
        }
    }

    logger.info("health_check", **health_status)
    return health_status


app.include_router(production_router)
app.include_router(settings_router)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "prisma_studio.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
