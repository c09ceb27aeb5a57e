"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, PaginatedResponse, HealthCheckResponse
from api.schemas.upload_schema import UploadResponse
from api.schemas.record_schema import (
    WagerResponse, TransactionResponse, WagerListResponse,
    TransactionListResponse, RecordSummaryResponse
)

__all__ = [
    # Common
    'ErrorResponse',
    'PaginatedResponse',
    'HealthCheckResponse',

    # Upload
    'UploadResponse',

    # Records
    'WagerResponse',
    'TransactionResponse',
    'WagerListResponse',
    'TransactionListResponse',
    'RecordSummaryResponse',
]
