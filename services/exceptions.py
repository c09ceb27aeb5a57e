"""
Ingestion error hierarchy.

Client-correctable problems (bad file, missing sheet) derive from
InvalidSpreadsheetError; store failures are reported as PersistenceStageError
carrying the stage that failed.
"""

from typing import Optional


class IngestError(Exception):
    """Base exception for all spreadsheet ingestion failures."""


class InvalidSpreadsheetError(IngestError):
    """The uploaded spreadsheet cannot be ingested as provided."""


class EmptyInputError(InvalidSpreadsheetError):
    """Raised when the uploaded workbook has no content."""

    def __init__(self, message: str = "Received empty file"):
        super().__init__(message)


class UnreadableWorkbookError(InvalidSpreadsheetError):
    """Raised when the bytes cannot be decoded as an xlsx workbook."""


class MissingSheetError(InvalidSpreadsheetError):
    """Raised when a required sheet is absent from the workbook."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f"Sheet '{sheet_name}' not found in the spreadsheet.")


class InvalidOwnerError(IngestError, ValueError):
    """Raised when the resolved owner identifier is blank or too long to store."""


class IngestInProgressError(IngestError):
    """Raised when another ingestion run holds the lock for the same owner."""

    def __init__(self, owner_id: str):
        self.owner_id = owner_id
        super().__init__(f"An upload for owner {owner_id} is already being processed.")


class PersistenceStageError(IngestError):
    """
    Raised when one of the replace-persist stages fails.

    Attributes:
        stage: PersistStage that failed
        cause: Original exception raised by the store
        data_modified: True when existing records were already deleted
    """

    def __init__(self, stage, cause: Optional[BaseException], data_modified: bool):
        self.stage = stage
        self.cause = cause
        self.data_modified = data_modified
        stage_name = getattr(stage, 'value', stage)
        super().__init__(f"Persistence failed during {stage_name}: {cause}")
