"""
Typed records produced by one ingestion run.

Records are immutable; owner_id always comes from the resolved caller,
never from spreadsheet content.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

# Width of the user_id column both record tables are keyed by
OWNER_ID_MAX_LENGTH = 255


class WagerRecord(BaseModel):
    """One row of the Wagers sheet."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    wager_date: Optional[date] = None
    casino_name: Optional[str] = None
    game_played: Optional[str] = None
    bet_size: Optional[float] = None
    num_plays: Optional[float] = None
    ending_balance: Optional[float] = None
    total_wagered: Optional[float] = None
    total_won: Optional[float] = None
    net_result: Optional[float] = None
    rtp: Optional[float] = None


class TransactionRecord(BaseModel):
    """One row of the Transactions sheet."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    transaction_date: Optional[date] = None
    casino_name: Optional[str] = None
    type: Optional[str] = None
    amount_spent: Optional[float] = None
    redemption_request: Optional[float] = None
    after_playthrough_value: Optional[float] = None
    cc_points: Optional[float] = None
    tax_implications: Optional[float] = None
