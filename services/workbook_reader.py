"""
Workbook decoding and sheet extraction.

Rows are returned as positional tuples: column order is the contract, header
text is never interpreted.
"""

import logging
from io import BytesIO
from typing import Any, List, Tuple

import openpyxl
from openpyxl.workbook.workbook import Workbook

from services.exceptions import EmptyInputError, MissingSheetError, UnreadableWorkbookError

logger = logging.getLogger(__name__)

RawRow = Tuple[Any, ...]

DEFAULT_HEADER_ROWS = 1


def decode_workbook(content: bytes) -> Workbook:
    """
    Decode uploaded bytes into an openpyxl workbook.

    The workbook is opened with ``data_only=True`` so formula cells yield
    their cached values, and ``read_only=True`` for streaming reads.

    Raises:
        EmptyInputError: If content is empty
        UnreadableWorkbookError: If content is not a readable workbook
    """
    if not content:
        raise EmptyInputError()

    try:
        workbook = openpyxl.load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        # Malformed XML parts inside a valid zip raise parser errors, not openpyxl ones
        logger.error(f"Could not decode workbook ({len(content)} bytes): {e}")
        raise UnreadableWorkbookError(f"Could not read spreadsheet: {e}") from e

    logger.info(f"Workbook parsed. Sheets: {workbook.sheetnames}")
    return workbook


def get_sheet_rows(workbook: Workbook, sheet_name: str,
                   header_rows: int = DEFAULT_HEADER_ROWS) -> List[RawRow]:
    """
    Return the data rows of a sheet as tuples of cell values.

    Args:
        workbook: Decoded workbook
        sheet_name: Name of the sheet to read
        header_rows: Number of leading rows to drop

    Raises:
        MissingSheetError: If the sheet does not exist
    """
    if sheet_name not in workbook.sheetnames:
        logger.error(f"Missing required sheet: {sheet_name}")
        raise MissingSheetError(sheet_name)

    worksheet = workbook[sheet_name]
    rows = [tuple(row) for row in worksheet.iter_rows(values_only=True)]
    data_rows = rows[header_rows:]

    logger.info(f"Found {len(data_rows)} rows in {sheet_name}")
    return data_rows
