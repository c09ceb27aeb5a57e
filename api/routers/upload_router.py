"""
Upload router - Replace a user's data with an uploaded spreadsheet.

The upload is processed synchronously: the response is sent once the
caller's stored wagers and transactions have been replaced.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from api.config import settings
from api.dependencies import (
    get_current_user, get_owner_lock, get_record_store,
    verify_file_extension, verify_file_size
)
from api.schemas.common import ErrorResponse
from api.schemas.upload_schema import UploadResponse
from services.owner_lock import OwnerLock
from services.record_store import SqlAlchemyRecordStore
from services.spreadsheet_ingest_service import SpreadsheetIngestService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/spreadsheets', tags=['spreadsheets'])


@router.post(
    '/parse',
    response_model=UploadResponse,
    responses={
        400: {'model': ErrorResponse, 'description': 'Empty file, unreadable file, or missing sheet'},
        401: {'description': 'Missing or invalid bearer token'},
        409: {'model': ErrorResponse, 'description': 'Another upload for this user is running'},
        413: {'description': 'File too large'},
        500: {'model': ErrorResponse, 'description': 'A persistence stage failed'},
    }
)
def parse_spreadsheet(
    spreadsheet: UploadFile = File(..., alias=settings.UPLOAD_FIELD_NAME,
                                   description="Workbook with 'Wagers' and 'Transactions' sheets"),
    store: SqlAlchemyRecordStore = Depends(get_record_store),
    owner_lock: OwnerLock = Depends(get_owner_lock),
    current_user: str = Depends(get_current_user)
):
    """
    Upload a workbook and replace the caller's stored records.

    **Workbook layout (by column position, first row is a header):**
    - `Wagers`: Date, Casino Name, Game Played, Bet Size, Num Plays,
      Ending Balance, Total Wagered, Total Won, Net Result, RTP
    - `Transactions`: Date, Casino Name, Type, Amount Spent, Redemption Request,
      After Playthrough Value, Credit Card Points, Tax Implications

    Rows without a date or casino name are skipped. Every successful upload
    replaces all previously stored rows for the caller.

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/api/spreadsheets/parse \\
         -H "Authorization: Bearer $TOKEN" \\
         -F "spreadsheet=@casinos.xlsx"
    ```
    """
    logger.info(f"Upload request from {current_user}: {spreadsheet.filename}")

    verify_file_extension(spreadsheet.filename)

    content = spreadsheet.file.read()
    verify_file_size(len(content))
    logger.info(f"Received file {spreadsheet.filename} ({len(content) / 1024:.1f} KB)")

    service = SpreadsheetIngestService(
        store,
        owner_lock=owner_lock,
        header_rows=settings.HEADER_ROWS
    )
    summary = service.ingest_bytes(content, current_user)

    return UploadResponse.from_summary(summary)
