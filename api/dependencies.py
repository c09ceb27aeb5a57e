"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions,
caller identity, the ingest lock, and upload checks.
"""

import logging
from pathlib import Path
from typing import Generator, Optional

import redis
import requests
from fastapi import Depends, HTTPException, Header, status
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from api.config import settings
from services.owner_lock import OwnerLock, RedisOwnerLock, null_owner_lock
from services.record_store import SqlAlchemyRecordStore

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {'pool_pre_ping': settings.DB_POOL_PRE_PING, 'echo': settings.DEBUG}
    if not settings.DATABASE_URL.startswith('sqlite'):
        options['pool_size'] = settings.DB_POOL_SIZE
        options['max_overflow'] = settings.DB_MAX_OVERFLOW
    return options


# Create database engine
engine = create_engine(settings.DATABASE_URL, **_engine_options())

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields database session and ensures it's closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_record_store(db: Session = Depends(get_db)) -> SqlAlchemyRecordStore:
    """Record store bound to the request's database session."""
    return SqlAlchemyRecordStore(db)


def get_owner_lock() -> OwnerLock:
    """
    Per-owner ingest lock.

    Returns a redis-backed lock when OWNER_LOCK_ENABLED is set, otherwise a
    no-op lock.
    """
    if not settings.OWNER_LOCK_ENABLED:
        return null_owner_lock

    redis_client = redis.Redis.from_url(settings.REDIS_URL)
    return RedisOwnerLock(
        redis_client,
        timeout=settings.OWNER_LOCK_TIMEOUT,
        blocking_timeout=settings.OWNER_LOCK_BLOCKING_TIMEOUT
    )


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Extract the bearer token from the Authorization header.

    Raises:
        HTTPException: 401 if the header is missing or malformed
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"}
        )

    scheme, _, token = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must use the Bearer scheme",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return token.strip()


def get_current_user(token: str = Depends(get_bearer_token)) -> str:
    """
    Resolve the caller's user identifier from the bearer token.

    With ENABLE_AUTH the token is sent to AUTH_USER_URL and the returned
    ``id`` is used. Without it the token itself is the user identifier
    (development only).

    Raises:
        HTTPException: 401 if the token does not resolve to a user
    """
    if not settings.ENABLE_AUTH:
        return token

    if not settings.AUTH_USER_URL:
        logger.error("ENABLE_AUTH is set but AUTH_USER_URL is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication is not configured"
        )

    headers = {'Authorization': f'Bearer {token}'}
    if settings.AUTH_API_KEY:
        headers['apikey'] = settings.AUTH_API_KEY

    try:
        response = requests.get(
            settings.AUTH_USER_URL,
            headers=headers,
            timeout=settings.AUTH_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        logger.error(f"Identity service request failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity service unavailable"
        )

    user_id = None
    if response.status_code == 200:
        user_id = (response.json() or {}).get('id')

    if not user_id:
        logger.warning(f"Token rejected by identity service (HTTP {response.status_code})")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or invalid token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return str(user_id)


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True


def verify_file_extension(filename: Optional[str]) -> bool:
    """
    Verify file has allowed extension.

    Raises:
        HTTPException: If extension is not allowed
    """
    ext = Path(filename or '').suffix.lower()

    if ext not in [e.lower() for e in settings.ALLOWED_EXTENSIONS]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension '{ext}' not allowed. "
                   f"Allowed extensions: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    return True
