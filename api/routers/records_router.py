"""
Records router - Browse the caller's stored wagers and transactions.
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_current_user, get_record_store
from api.schemas.record_schema import (
    RecordSummaryResponse, TransactionListResponse, TransactionResponse,
    WagerListResponse, WagerResponse
)
from services.record_store import SqlAlchemyRecordStore
from services.row_mapper import TRANSACTIONS_COLLECTION, WAGERS_COLLECTION

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/records', tags=['records'])


@router.get('/wagers', response_model=WagerListResponse)
def list_wagers(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    store: SqlAlchemyRecordStore = Depends(get_record_store),
    current_user: str = Depends(get_current_user)
):
    """
    List the caller's stored wagers, newest first.

    **Example:**
    ```bash
    curl -H "Authorization: Bearer $TOKEN" "http://localhost:8000/api/records/wagers?page=1"
    ```
    """
    total = store.count_by_owner(WAGERS_COLLECTION, current_user)
    rows = store.list_by_owner(WAGERS_COLLECTION, current_user,
                               offset=(page - 1) * page_size, limit=page_size)

    return WagerListResponse.create(
        items=[WagerResponse.model_validate(row) for row in rows],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get('/transactions', response_model=TransactionListResponse)
def list_transactions(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    store: SqlAlchemyRecordStore = Depends(get_record_store),
    current_user: str = Depends(get_current_user)
):
    """List the caller's stored transactions, newest first."""
    total = store.count_by_owner(TRANSACTIONS_COLLECTION, current_user)
    rows = store.list_by_owner(TRANSACTIONS_COLLECTION, current_user,
                               offset=(page - 1) * page_size, limit=page_size)

    return TransactionListResponse.create(
        items=[TransactionResponse.model_validate(row) for row in rows],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get('/summary', response_model=RecordSummaryResponse)
def record_summary(
    store: SqlAlchemyRecordStore = Depends(get_record_store),
    current_user: str = Depends(get_current_user)
):
    """Count the caller's stored wagers and transactions."""
    return RecordSummaryResponse(
        wagers=store.count_by_owner(WAGERS_COLLECTION, current_user),
        transactions=store.count_by_owner(TRANSACTIONS_COLLECTION, current_user)
    )
