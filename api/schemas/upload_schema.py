"""
Upload-related Pydantic schemas.

Responses keep the camelCase keys the web client reads.
"""

from pydantic import BaseModel, Field

from services.spreadsheet_ingest_service import IngestSummary


class UploadResponse(BaseModel):
    """Response after a spreadsheet has replaced the caller's data."""

    message: str = Field(..., description="Human-readable result")
    wagers_added: int = Field(..., alias="wagersAdded", description="Wager records stored")
    transactions_added: int = Field(..., alias="transactionsAdded",
                                    description="Transaction records stored")
    wagers_skipped: int = Field(0, alias="wagersSkipped",
                                description="Wager rows skipped for missing date or casino")
    transactions_skipped: int = Field(0, alias="transactionsSkipped",
                                      description="Transaction rows skipped for missing date or casino")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "message": "Successfully processed spreadsheet. Added 42 wager records "
                           "and 7 transaction records.",
                "wagersAdded": 42,
                "transactionsAdded": 7,
                "wagersSkipped": 1,
                "transactionsSkipped": 0
            }
        }

    @classmethod
    def from_summary(cls, summary: IngestSummary) -> 'UploadResponse':
        return cls(
            message=summary.message,
            wagers_added=summary.wagers_added,
            transactions_added=summary.transactions_added,
            wagers_skipped=summary.wagers_skipped,
            transactions_skipped=summary.transactions_skipped
        )
