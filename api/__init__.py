"""
FastAPI application for the spreadsheet ingestion system.

This package contains the REST API for uploading wager and transaction
workbooks and browsing the stored records.
"""

__version__ = "1.0.0"
