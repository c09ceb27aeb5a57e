"""
Positional row mapping and batch assembly.

Each sheet has a fixed column contract: column N of every data row always
maps to the same record field. Rows are screened before any coercion runs:

1. Entirely blank rows are dropped silently.
2. Rows with a falsy date (column 0) or casino name (column 1) are dropped
   with a warning.

Everything else becomes a record, even if individual fields coerce to None.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from services.cell_coercion import coerce_date, coerce_number, coerce_string
from services.records import TransactionRecord, WagerRecord

logger = logging.getLogger(__name__)

WAGERS_SHEET = 'Wagers'
TRANSACTIONS_SHEET = 'Transactions'

WAGERS_COLLECTION = 'user_wagers'
TRANSACTIONS_COLLECTION = 'user_transactions'


class ColumnSpec(NamedTuple):
    """Record field fed by one column position."""
    field: str
    coercer: Callable[[Any], Any]


class SheetContract(NamedTuple):
    """Fixed mapping from a sheet's columns to a record type."""
    sheet_name: str
    collection: str
    record_type: Type[BaseModel]
    columns: Tuple[ColumnSpec, ...]


class SkipReason(str, Enum):
    """Why a raw row produced no record."""
    BLANK = 'blank'
    MISSING_KEY_FIELDS = 'missing_key_fields'


WAGER_CONTRACT = SheetContract(
    sheet_name=WAGERS_SHEET,
    collection=WAGERS_COLLECTION,
    record_type=WagerRecord,
    columns=(
        ColumnSpec('wager_date', coerce_date),
        ColumnSpec('casino_name', coerce_string),
        ColumnSpec('game_played', coerce_string),
        ColumnSpec('bet_size', coerce_number),
        ColumnSpec('num_plays', coerce_number),
        ColumnSpec('ending_balance', coerce_number),
        ColumnSpec('total_wagered', coerce_number),
        ColumnSpec('total_won', coerce_number),
        ColumnSpec('net_result', coerce_number),
        ColumnSpec('rtp', coerce_number),
    ),
)

TRANSACTION_CONTRACT = SheetContract(
    sheet_name=TRANSACTIONS_SHEET,
    collection=TRANSACTIONS_COLLECTION,
    record_type=TransactionRecord,
    columns=(
        ColumnSpec('transaction_date', coerce_date),
        ColumnSpec('casino_name', coerce_string),
        ColumnSpec('type', coerce_string),
        ColumnSpec('amount_spent', coerce_number),
        ColumnSpec('redemption_request', coerce_number),
        ColumnSpec('after_playthrough_value', coerce_number),
        ColumnSpec('cc_points', coerce_number),
        ColumnSpec('tax_implications', coerce_number),
    ),
)


def is_blank_row(row: Optional[Sequence[Any]]) -> bool:
    """True for a missing row, a row with no cells, or one with only None/'' cells."""
    if not row:
        return True
    return all(cell is None or cell == '' for cell in row)


def map_row(
    row: Optional[Sequence[Any]],
    contract: SheetContract,
    owner_id: str
) -> Tuple[Optional[BaseModel], Optional[SkipReason]]:
    """
    Map one raw row to a record.

    Returns:
        (record, None) when the row is accepted, (None, reason) when skipped.
    """
    if is_blank_row(row):
        return None, SkipReason.BLANK

    if len(row) < 2 or not row[0] or not row[1]:
        return None, SkipReason.MISSING_KEY_FIELDS

    values = {}
    for position, column in enumerate(contract.columns):
        raw = row[position] if position < len(row) else None
        values[column.field] = column.coercer(raw)

    return contract.record_type(owner_id=owner_id, **values), None


@dataclass
class BatchResult:
    """Records accepted from one sheet plus skip counters."""
    sheet_name: str
    records: List[BaseModel] = field(default_factory=list)
    skipped_blank: int = 0
    skipped_incomplete: int = 0

    @property
    def accepted(self) -> int:
        return len(self.records)

    @property
    def total_rows(self) -> int:
        return self.accepted + self.skipped_blank + self.skipped_incomplete


def assemble_batch(
    rows: Iterable[Sequence[Any]],
    contract: SheetContract,
    owner_id: str,
    first_row_number: int = 2
) -> BatchResult:
    """
    Map every raw row of a sheet, keeping accepted records in input order.

    Args:
        rows: Raw data rows from the sheet
        contract: Column contract for the sheet
        owner_id: Resolved identity stamped on every record
        first_row_number: Spreadsheet row number of the first data row (for logs)
    """
    batch = BatchResult(sheet_name=contract.sheet_name)

    for offset, row in enumerate(rows):
        record, reason = map_row(row, contract, owner_id)

        if reason is SkipReason.BLANK:
            batch.skipped_blank += 1
            continue

        if reason is SkipReason.MISSING_KEY_FIELDS:
            batch.skipped_incomplete += 1
            logger.warning(
                f"Skipping {contract.sheet_name} row {first_row_number + offset} "
                f"due to missing Date or Casino Name: {list(row)}"
            )
            continue

        batch.records.append(record)

    logger.info(f"Successfully parsed {batch.accepted} {contract.sheet_name.lower()} records "
                f"({batch.skipped_incomplete} incomplete, {batch.skipped_blank} blank rows skipped)")
    return batch
