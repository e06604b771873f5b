"""Tests for the check_updates and fetch_events entry points."""
import logging
import os
from unittest.mock import patch

import pytest

import check_updates
import fetch_events
from processor.models import StalenessReport, SyncResult
from source.notion_database import NotionApiError

ENV = {
    'NOTION_API_KEY': 'secret-token',
    'NOTION_EVENTS_DATABASE': 'db-123',
}


@pytest.fixture(autouse=True)
def no_env_file():
    """Keep a developer's .env file out of the tests."""
    with patch('check_updates.load_env_file'), \
            patch('fetch_events.load_env_file'), \
            patch('check_updates.setup_logging'), \
            patch('fetch_events.setup_logging'):
        yield


@pytest.fixture
def mock_env():
    with patch.dict(os.environ, ENV, clear=True):
        yield


class TestCheckUpdates:
    """Test cases for the check_updates exit codes."""

    @patch('check_updates.StalenessChecker')
    def test_fetch_needed(self, mock_checker_class, mock_env):
        mock_checker_class.return_value.check.return_value = StalenessReport(
            needs_sync=True, reason='Database updated'
        )

        assert check_updates.main() == 0

    @patch('check_updates.StalenessChecker')
    def test_skip(self, mock_checker_class, mock_env):
        mock_checker_class.return_value.check.return_value = StalenessReport(
            needs_sync=False, reason='skip fetch'
        )

        assert check_updates.main() == 1

    def test_missing_credentials_fetches(self):
        """Test that missing credentials fail open."""
        with patch.dict(os.environ, {}, clear=True):
            assert check_updates.main() == 0

    @patch('check_updates.StalenessChecker')
    def test_checker_error_fetches(self, mock_checker_class, mock_env):
        mock_checker_class.return_value.check.side_effect = OSError('permission denied')

        assert check_updates.main() == 0


class TestFetchEvents:
    """Test cases for the fetch_events entry point."""

    @patch('fetch_events.build_orchestrator')
    def test_success(self, mock_build, mock_env):
        mock_build.return_value.run.return_value = SyncResult(
            published=False, event_count=0, statuses_updated=0, digest='d'
        )

        assert fetch_events.main() == 0

    def test_missing_credentials(self):
        """Test that missing credentials abort before any network call."""
        with patch.dict(os.environ, {}, clear=True), \
                patch('fetch_events.build_orchestrator') as mock_build:
            assert fetch_events.main() == 1

        mock_build.assert_not_called()

    @pytest.mark.parametrize('code, hint', [
        ('object_not_found', 'NOTION_EVENTS_DATABASE is correct'),
        ('unauthorized', 'NOTION_API_KEY is correct'),
    ])
    @patch('fetch_events.build_orchestrator')
    def test_query_failure_prints_hint(self, mock_build, code, hint, mock_env, caplog):
        """Test the remediation hint for well-known Notion errors."""
        mock_build.return_value.run.side_effect = NotionApiError(
            'failed', status=400, code=code
        )

        with caplog.at_level(logging.ERROR):
            assert fetch_events.main() == 1

        assert any(hint in r.message for r in caplog.records)

    @patch('fetch_events.build_orchestrator')
    def test_unexpected_failure(self, mock_build, mock_env):
        mock_build.return_value.run.side_effect = OSError('read-only file system')

        assert fetch_events.main() == 1

    def test_build_orchestrator_wires_settings(self, mock_env):
        """Test that settings flow into the orchestrator components."""
        from settings import load_settings

        settings = load_settings()
        settings.settle_delay_seconds = 0.5
        settings.max_workers = 3

        orchestrator = fetch_events.build_orchestrator(settings)

        assert orchestrator.settle_delay == 0.5
        assert orchestrator.status_updater.max_workers == 3
        assert orchestrator.client.database_id == 'db-123'

    def test_build_orchestrator_reuses_given_client(self, mock_env):
        """Test that a passed client is shared by the orchestrator and status updater."""
        from settings import load_settings

        settings = load_settings()
        client = fetch_events.build_client(settings)

        orchestrator = fetch_events.build_orchestrator(settings, client)

        assert orchestrator.client is client
        assert orchestrator.status_updater.client is client
