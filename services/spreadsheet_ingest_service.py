"""
Spreadsheet Ingest Service - Framework-agnostic business logic.

This module drives one ingestion run: decode the uploaded workbook, extract
the Wagers and Transactions sheets, map their rows to records, and replace
the owner's stored records with the new batches. Used by both the HTTP API
and the CLI.
"""

import logging
from typing import Callable, Optional

from openpyxl.workbook.workbook import Workbook
from pydantic import BaseModel

from services.exceptions import InvalidOwnerError, PersistenceStageError
from services.owner_lock import OwnerLock, null_owner_lock
from services.record_store import RecordStore
from services.records import OWNER_ID_MAX_LENGTH
from services.replace_persist import ReplacePersistSequencer
from services.row_mapper import TRANSACTION_CONTRACT, WAGER_CONTRACT, assemble_batch
from services.workbook_reader import DEFAULT_HEADER_ROWS, decode_workbook, get_sheet_rows

logger = logging.getLogger(__name__)


class IngestSummary(BaseModel):
    """Counts reported after a successful run."""

    wagers_added: int
    transactions_added: int
    wagers_skipped: int = 0
    transactions_skipped: int = 0

    @property
    def message(self) -> str:
        return (f"Successfully processed spreadsheet. Added {self.wagers_added} wager records "
                f"and {self.transactions_added} transaction records.")


class SpreadsheetIngestService:
    """
    Replaces an owner's wagers and transactions with the content of a workbook.

    A missing sheet or unreadable file fails the run before anything is
    written. Store failures surface as PersistenceStageError naming the stage.
    """

    def __init__(
        self,
        store: RecordStore,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        owner_lock: Optional[OwnerLock] = None,
        header_rows: int = DEFAULT_HEADER_ROWS
    ):
        """
        Initialize ingest service.

        Args:
            store: Persistence operations for both collections
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            owner_lock: Optional per-owner lock held around persistence
            header_rows: Leading rows of each sheet that are not data
        """
        self.store = store
        self.progress_callback = progress_callback or (lambda *args: None)
        self.owner_lock = owner_lock or null_owner_lock
        self.header_rows = header_rows

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    @staticmethod
    def _require_owner(owner_id: str) -> str:
        if owner_id is None or not str(owner_id).strip():
            raise InvalidOwnerError("owner_id is required")
        if len(str(owner_id)) > OWNER_ID_MAX_LENGTH:
            raise InvalidOwnerError(
                f"owner_id is longer than {OWNER_ID_MAX_LENGTH} characters"
            )
        return str(owner_id)

    def ingest_bytes(self, content: bytes, owner_id: str) -> IngestSummary:
        """
        Decode uploaded bytes and ingest them for owner_id.

        Raises:
            InvalidOwnerError, EmptyInputError, UnreadableWorkbookError,
            MissingSheetError, IngestInProgressError, PersistenceStageError
        """
        owner_id = self._require_owner(owner_id)

        self._emit_progress('decoding', 5, f"Reading workbook ({len(content or b'')} bytes)...")
        workbook = decode_workbook(content)
        try:
            return self.ingest_workbook(workbook, owner_id)
        finally:
            workbook.close()

    def ingest_workbook(self, workbook: Workbook, owner_id: str) -> IngestSummary:
        """Ingest an already decoded workbook for owner_id."""
        owner_id = self._require_owner(owner_id)
        logger.info(f"Starting ingestion for user {owner_id}")

        # Both sheets are located before any row is mapped or any data touched
        self._emit_progress('extracting', 15, 'Locating Wagers and Transactions sheets...')
        wager_rows = get_sheet_rows(workbook, WAGER_CONTRACT.sheet_name, self.header_rows)
        transaction_rows = get_sheet_rows(workbook, TRANSACTION_CONTRACT.sheet_name, self.header_rows)

        first_row = self.header_rows + 1
        self._emit_progress('mapping', 30, f"Mapping {len(wager_rows)} wager rows...")
        wagers = assemble_batch(wager_rows, WAGER_CONTRACT, owner_id, first_row)

        self._emit_progress('mapping', 45, f"Mapping {len(transaction_rows)} transaction rows...")
        transactions = assemble_batch(transaction_rows, TRANSACTION_CONTRACT, owner_id, first_row)

        self._emit_progress('persisting', 60,
                            f"Replacing stored data with {wagers.accepted} wagers and "
                            f"{transactions.accepted} transactions...")
        with self.owner_lock(owner_id):
            outcome = ReplacePersistSequencer(self.store).run(
                owner_id, wagers.records, transactions.records
            )

        if not outcome.succeeded:
            self._emit_progress('failed', 0, f"Stage {outcome.failed_stage.value} failed")
            raise PersistenceStageError(
                outcome.failed_stage, outcome.cause, outcome.data_modified
            ) from outcome.cause

        summary = IngestSummary(
            wagers_added=outcome.wagers_added,
            transactions_added=outcome.transactions_added,
            wagers_skipped=wagers.skipped_incomplete,
            transactions_skipped=transactions.skipped_incomplete
        )
        self._emit_progress('complete', 100, summary.message)
        return summary
