"""
Tests for the ingest CLI in direct mode, against a temporary SQLite file.
"""

import pytest
from click.testing import CliRunner

from scripts.ingest_cli import cli


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def workbook_file(tmp_path, make_workbook_bytes, sample_sheets):
    path = tmp_path / 'casinos.xlsx'
    path.write_bytes(make_workbook_bytes(sample_sheets))
    return path


class TestIngestCommand:
    """Test the ingest command."""

    def test_direct_ingest(self, database_url, workbook_file):
        runner = CliRunner()

        result = runner.invoke(cli, ['ingest', '--file', str(workbook_file), '--owner', 'owner-1',
                                     '--database-url', database_url])

        assert result.exit_code == 0, result.output
        assert 'Added 1 wager records and 0 transaction records' in result.output

        counts = runner.invoke(cli, ['counts', '--owner', 'owner-1', '--database-url', database_url])
        assert 'Wagers: 1' in counts.output
        assert 'Transactions: 0' in counts.output

    def test_owner_required_in_direct_mode(self, database_url, workbook_file):
        result = CliRunner().invoke(cli, ['ingest', '--file', str(workbook_file),
                                          '--database-url', database_url])

        assert result.exit_code == 2
        assert '--owner is required' in result.output

    def test_blank_owner_is_usage_error(self, database_url, workbook_file):
        result = CliRunner().invoke(cli, ['ingest', '--file', str(workbook_file), '--owner', '   ',
                                          '--database-url', database_url])

        assert result.exit_code == 2
        assert 'Invalid --owner' in result.output
        assert not isinstance(result.exception, ValueError)

    def test_missing_sheet_fails(self, tmp_path, database_url, make_workbook_bytes):
        path = tmp_path / 'bad.xlsx'
        path.write_bytes(make_workbook_bytes({'Wagers': [['Date']]}))

        result = CliRunner().invoke(cli, ['ingest', '--file', str(path), '--owner', 'owner-1',
                                          '--database-url', database_url])

        assert result.exit_code == 1


class TestPurgeCommand:
    """Test the purge command."""

    def test_purge(self, database_url, workbook_file):
        runner = CliRunner()
        runner.invoke(cli, ['ingest', '--file', str(workbook_file), '--owner', 'owner-1',
                            '--database-url', database_url])

        result = runner.invoke(cli, ['purge', '--owner', 'owner-1', '--database-url', database_url,
                                     '--yes'])

        assert result.exit_code == 0
        counts = runner.invoke(cli, ['counts', '--owner', 'owner-1', '--database-url', database_url])
        assert 'Wagers: 0' in counts.output

    def test_purge_aborts_without_confirmation(self, database_url):
        result = CliRunner().invoke(cli, ['purge', '--owner', 'owner-1',
                                          '--database-url', database_url], input='n\n')

        assert result.exit_code == 1
