"""Unit tests for StatusUpdater."""
import time
from datetime import date
from unittest.mock import Mock

import pytest
import responses

import notion_pages as pages
from processor.models import RemoteRecord
from source.notion_database import (
    NotionApiError,
    NotionDatabaseClient,
    VISIBLE_UPCOMING_FILTER,
)
from sync.status_updater import StatusUpdater, has_date_passed, is_lapsed_upcoming

TODAY = date(2025, 6, 15)


def record(page_id='page-1', start='2099-01-01', **kwargs):
    return RemoteRecord.from_page(pages.event_page(page_id=page_id, start=start, **kwargs))


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def updater(client):
    return StatusUpdater(client, max_workers=4, clock=lambda: TODAY)


@pytest.fixture
def new_york_timezone(monkeypatch):
    """Run the test with a local timezone west of UTC."""
    monkeypatch.setenv('TZ', 'America/New_York')
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestLapsedChecks:
    """Test cases for the date comparisons."""

    def test_date_before_today(self):
        assert has_date_passed(record(start='2025-06-14T20:00:00'), TODAY) is True

    def test_event_later_today_has_not_passed(self):
        """Test that events earlier today still count as today."""
        assert has_date_passed(record(start='2025-06-15T00:30:00'), TODAY) is False
        assert has_date_passed(record(start='2025-06-15T23:00:00'), TODAY) is False

    def test_missing_or_non_date_property(self):
        assert has_date_passed(record(start=None), TODAY) is False
        not_a_date = RemoteRecord.from_page(
            pages.event_page(start=None, Date=pages.rich_text('2000-01-01'))
        )
        assert has_date_passed(not_a_date, TODAY) is False

    def test_only_visible_upcoming_records_lapse(self):
        assert is_lapsed_upcoming(record(start='2000-01-01'), TODAY) is True
        assert is_lapsed_upcoming(
            record(start='2000-01-01', status_name='Past'), TODAY
        ) is False
        assert is_lapsed_upcoming(
            record(start='2000-01-01', visible=False), TODAY
        ) is False


class TestStatusUpdater:
    """Test cases for StatusUpdater class."""

    def test_future_event_is_not_updated(self, updater, client):
        """Test that an upcoming event in the future gets no update call."""
        records = [record(name='A', start='2099-01-01')]

        count = updater.reconcile_statuses(records)

        assert count == 0
        client.update_status.assert_not_called()

    def test_past_event_is_updated_to_past(self, updater, client):
        """Test that an upcoming event in the past is moved to Past once."""
        records = [record(page_id='b', name='B', start='2000-01-01')]

        count = updater.reconcile_statuses(records)

        assert count == 1
        client.update_status.assert_called_once_with('b', 'Past')

    def test_event_today_is_not_updated(self, updater, client):
        records = [record(start='2025-06-15T09:00:00')]

        assert updater.reconcile_statuses(records) == 0
        client.update_status.assert_not_called()

    def test_failed_update_does_not_stop_others(self, updater, client):
        """Test that one failing update is counted and the rest proceed."""
        def update_status(page_id, status):
            if page_id == 'bad':
                raise NotionApiError('conflict', status=409, code='conflict_error')
            return {'id': page_id}

        client.update_status.side_effect = update_status
        records = [
            record(page_id='ok-1', start='2000-01-01'),
            record(page_id='bad', start='2000-01-02'),
            record(page_id='ok-2', start='2000-01-03'),
            record(page_id='future', start='2099-01-01'),
        ]

        result = updater.update_lapsed(records)

        assert result.candidates == 3
        assert result.updated == 2
        assert result.failed == ['bad']
        assert result.changed is True
        assert client.update_status.call_count == 3

    def test_reconcile_queries_visible_upcoming(self, updater, client):
        """Test that reconcile queries visible Upcoming events."""
        client.query_records.return_value = [record(page_id='old', start='2000-01-01')]

        result = updater.reconcile()

        client.query_records.assert_called_once_with(query_filter=VISIBLE_UPCOMING_FILTER)
        assert result.updated == 1
        client.update_status.assert_called_once_with('old', 'Past')

    def test_reconcile_absorbs_query_failure(self, updater, client):
        """Test that a failed candidate query does not raise."""
        client.query_records.side_effect = NotionApiError('boom', status=500)

        result = updater.reconcile()

        assert result.updated == 0
        assert result.changed is False
        client.update_status.assert_not_called()


class TestDateOnlyWestOfUtc:
    """Test cases for date-only events in a timezone behind UTC."""

    def test_date_only_today_is_not_lapsed(self, updater, client, new_york_timezone):
        """Test that an all-day event dated today stays Upcoming."""
        assert updater.reconcile_statuses([record(page_id='t', start='2025-06-15')]) == 0
        client.update_status.assert_not_called()

    def test_date_only_yesterday_is_lapsed(self, updater, client, new_york_timezone):
        """Test that an all-day event dated yesterday is moved to Past."""
        assert updater.reconcile_statuses([record(page_id='y', start='2025-06-14')]) == 1
        client.update_status.assert_called_once_with('y', 'Past')


class TestUndecodableResponses:
    """Test cases for status updates answered with non-JSON bodies."""

    @responses.activate
    def test_html_success_body_counts_as_failure(self):
        """Test that one undecodable response does not abort the other updates."""
        responses.add(
            responses.PATCH, 'https://api.notion.com/v1/pages/bad',
            body='<html>gateway</html>', status=200
        )
        responses.add(
            responses.PATCH, 'https://api.notion.com/v1/pages/ok',
            json={'object': 'page', 'id': 'ok'}
        )
        updater = StatusUpdater(
            NotionDatabaseClient('secret-token', 'db-123'), clock=lambda: TODAY
        )

        result = updater.update_lapsed([
            record(page_id='bad', start='2000-01-01'),
            record(page_id='ok', start='2000-01-01'),
        ])

        assert result.candidates == 2
        assert result.updated == 1
        assert result.failed == ['bad']
