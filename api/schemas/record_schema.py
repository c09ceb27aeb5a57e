"""
Stored record Pydantic schemas.

This module contains response schemas for browsing a user's stored
wagers and transactions.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from api.schemas.common import PaginatedResponse


class WagerResponse(BaseModel):
    """Stored wager row."""

    id: int
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

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    """Stored transaction row."""

    id: int
    transaction_date: Optional[date] = None
    casino_name: Optional[str] = None
    type: Optional[str] = None
    amount_spent: Optional[float] = None
    redemption_request: Optional[float] = None
    after_playthrough_value: Optional[float] = None
    cc_points: Optional[float] = None
    tax_implications: Optional[float] = None

    class Config:
        from_attributes = True


class WagerListResponse(PaginatedResponse[WagerResponse]):
    """Paginated wagers."""


class TransactionListResponse(PaginatedResponse[TransactionResponse]):
    """Paginated transactions."""


class RecordSummaryResponse(BaseModel):
    """Counts of a user's stored records."""

    wagers: int = Field(..., description="Stored wager rows")
    transactions: int = Field(..., description="Stored transaction rows")
