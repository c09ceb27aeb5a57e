"""
Pytest configuration and fixtures for spreadsheet ingestion tests.
"""

import os
import zipfile
from collections import defaultdict
from io import BytesIO

import openpyxl
import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.models.schema import Base

# Load environment
load_dotenv()

# Test database URL (in-memory SQLite unless a separate test database is configured)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')

WAGER_HEADER = ['Date', 'Casino Name', 'Game Played', 'Bet Size', 'Num Plays',
                'Ending Balance', 'Total Wagered', 'Total Won', 'Net Result', 'RTP']
TRANSACTION_HEADER = ['Date', 'Casino Name', 'Type', 'Amount Spent', 'Redemption Request',
                      'After Playthrough Value', 'Credit Card Points', 'Tax Implications']


@pytest.fixture(scope='function')
def engine():
    """Create a fresh test database engine with all tables."""
    if TEST_DATABASE_URL.startswith('sqlite'):
        eng = create_engine(
            TEST_DATABASE_URL,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    else:
        eng = create_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture(scope='function')
def session(session_factory):
    """Create a new database session for a test."""
    sess = session_factory()
    yield sess
    sess.close()


def build_workbook(sheets):
    """
    Build an in-memory workbook.

    Args:
        sheets: Mapping of sheet name to list of rows (first row is the header)
    """
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(name)
        for row in rows:
            worksheet.append(list(row))
    return workbook


def workbook_bytes(sheets) -> bytes:
    buffer = BytesIO()
    build_workbook(sheets).save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def make_workbook_bytes():
    return workbook_bytes


@pytest.fixture
def corrupt_workbook_bytes():
    """A real zip archive whose content-types part is not XML."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        archive.writestr('[Content_Types].xml', 'not xml <<<')
        archive.writestr('xl/workbook.xml', '<workbook')
    return buffer.getvalue()


@pytest.fixture
def sample_sheets():
    """One valid wager, one wager missing its date, and no transactions."""
    return {
        'Wagers': [
            WAGER_HEADER,
            [45292, 'Casino A', 'Slots', 1, 10, 100, 50, 40, -10, 0.8],
            [None, 'Casino B', 'Blackjack', 5, 2, 90, 10, 0, -10, 0],
        ],
        'Transactions': [
            TRANSACTION_HEADER,
        ],
    }


class RecordingStore:
    """
    In-memory RecordStore that records every call.

    Args:
        fail_on: Set of (operation, collection) pairs that raise, e.g.
                 {('delete', 'user_wagers')}
    """

    def __init__(self, fail_on=None):
        self.fail_on = set(fail_on or ())
        self.calls = []
        self.rows = defaultdict(list)

    def _maybe_fail(self, operation, collection):
        if (operation, collection) in self.fail_on:
            raise RuntimeError(f"{operation} {collection} unavailable")

    def delete_all_by_owner(self, collection, owner_id):
        self.calls.append(('delete', collection, owner_id))
        self._maybe_fail('delete', collection)
        self.rows[collection] = [r for r in self.rows[collection] if r.owner_id != owner_id]

    def insert_batch(self, collection, records):
        self.calls.append(('insert', collection, len(records)))
        self._maybe_fail('insert', collection)
        self.rows[collection].extend(records)

    def operations(self):
        return [(op, collection) for op, collection, _ in self.calls]


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def make_store():
    """Factory for RecordingStore instances with injected failures."""
    return RecordingStore
