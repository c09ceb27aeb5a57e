"""Models package for the spreadsheet ingestion system."""
from backend.models.schema import Base, UserWager, UserTransaction

__all__ = ['Base', 'UserWager', 'UserTransaction']
