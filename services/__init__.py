"""
Service layer for the spreadsheet ingestion system.

This package contains framework-agnostic business logic (workbook decoding,
row mapping, replace-persist sequencing) used by both the CLI and the API.
"""

__version__ = "1.0.0"
