"""
FastAPI application for the spreadsheet ingestion system.

This module creates and configures the FastAPI application, registering
all routers, error handlers and middleware.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

import redis
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from api.config import settings
from api.dependencies import SessionLocal, engine
from api.routers import records_router, upload_router
from api.schemas.common import ErrorResponse, HealthCheckResponse
from backend.models.schema import Base
from services.exceptions import (
    IngestInProgressError, InvalidOwnerError, InvalidSpreadsheetError, PersistenceStageError
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT,
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials
    logger.info(f"Owner lock: {'redis' if settings.OWNER_LOCK_ENABLED else 'disabled'}")

    # Ensure database tables exist
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    yield

    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS
)


# Exception handlers

def _error(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            message=message,
            path=str(request.url),
            **extra
        ).model_dump(mode='json')
    )


@app.exception_handler(InvalidSpreadsheetError)
async def invalid_spreadsheet_handler(request: Request, exc: InvalidSpreadsheetError):
    """Client-correctable upload problems: empty, unreadable, missing sheet."""
    logger.warning(f"Rejected spreadsheet: {exc}")
    return _error(request, status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(InvalidOwnerError)
async def invalid_owner_handler(request: Request, exc: InvalidOwnerError):
    """The caller identity cannot key stored records."""
    logger.warning(f"Rejected owner id: {exc}")
    return _error(request, status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(IngestInProgressError)
async def ingest_in_progress_handler(request: Request, exc: IngestInProgressError):
    """Another upload for the same user holds the lock."""
    return _error(request, status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(PersistenceStageError)
async def persistence_stage_handler(request: Request, exc: PersistenceStageError):
    """A delete or insert stage failed; report which one."""
    logger.error(f"Ingestion failed at stage {exc.stage.value} "
                 f"(data modified: {exc.data_modified}): {exc.cause}")
    return _error(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc),
        stage=exc.stage.value,
        detail={'data_modified': exc.data_modified}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return _error(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        detail={"message": str(exc)} if settings.DEBUG else None
    )


# Register routers with API prefix
app.include_router(upload_router.router, prefix=settings.API_PREFIX)
app.include_router(records_router.router, prefix=settings.API_PREFIX)


# Root endpoints

@app.get('/', include_in_schema=False)
async def root():
    """
    Root endpoint - redirect to docs.
    """
    return {
        'message': f'Welcome to {settings.API_TITLE}',
        'version': settings.API_VERSION,
        'docs': '/docs',
        'redoc': '/redoc',
        'openapi': '/openapi.json'
    }


@app.get('/health', response_model=HealthCheckResponse, tags=['health'])
def health_check():
    """
    Health check endpoint.

    Checks connectivity to:
    - Database
    - Redis (only when the owner lock is enabled)
    """
    health_status = {
        'status': 'healthy',
        'timestamp': datetime.utcnow(),
        'version': settings.API_VERSION,
        'database': 'unknown',
        'redis': 'disabled'
    }

    # Check database
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
        health_status['database'] = 'connected'
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status['database'] = 'disconnected'
        health_status['status'] = 'unhealthy'

    # Check Redis
    if settings.OWNER_LOCK_ENABLED:
        try:
            redis_client = redis.Redis.from_url(settings.REDIS_URL)
            redis_client.ping()
            health_status['redis'] = 'connected'
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            health_status['redis'] = 'disconnected'
            health_status['status'] = 'degraded'

    return HealthCheckResponse(**health_status)


@app.get('/api/ping', tags=['health'])
async def ping():
    """
    Simple ping endpoint for load balancers.

    **Returns:**
    ```json
    {"ping": "pong"}
    ```
    """
    return {'ping': 'pong'}


# Middleware for request logging

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} - {response.status_code}")
    return response


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(
        'api.main:app',
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
