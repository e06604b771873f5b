"""Moves Upcoming events whose date has passed to Past in Notion."""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable, List, Optional

from processor.dates import local_day, today
from processor.models import RemoteRecord, StatusUpdateResult
from processor.property_extractor import extract_property_value
from source.notion_database import (
    NotionApiError,
    NotionDatabaseClient,
    STATUS_PAST,
    STATUS_PROPERTY,
    STATUS_UPCOMING,
    VISIBLE_PROPERTY,
    VISIBLE_UPCOMING_FILTER,
)

logger = logging.getLogger(__name__)


def has_date_passed(record: RemoteRecord, current_day: date) -> bool:
    """
    Check whether a record's date is strictly before the given day.

    Both sides are compared as local calendar days, so an event later
    today is not considered passed.

    Args:
        record: Record with a date-typed Date property
        current_day: Day to compare against

    Returns:
        True if the event day is before current_day
    """
    event_day = local_day(record.date_start)
    return event_day is not None and event_day < current_day


def is_lapsed_upcoming(record: RemoteRecord, current_day: date) -> bool:
    """True for a visible Upcoming record whose date has passed."""
    visible = record.properties.get(VISIBLE_PROPERTY)
    if visible is not None and not extract_property_value(visible):
        return False
    status = record.properties.get(STATUS_PROPERTY)
    if status is not None and extract_property_value(status) != STATUS_UPCOMING:
        return False
    return has_date_passed(record, current_day)


class StatusUpdater:
    """Reconciles event statuses with the calendar."""

    def __init__(
        self,
        client: NotionDatabaseClient,
        max_workers: int = 8,
        clock: Callable[[], date] = today
    ):
        """
        Initialize the status updater.

        Args:
            client: Notion client used for queries and updates
            max_workers: Number of concurrent page updates
            clock: Returns the current local day
        """
        self.client = client
        self.max_workers = max_workers
        self.clock = clock

    def reconcile(self) -> StatusUpdateResult:
        """
        Query visible Upcoming events and mark the passed ones as Past.

        A failed query is logged and treated as nothing to update.

        Returns:
            StatusUpdateResult for this run
        """
        logger.info("🔄 Checking for events that need status updates...")
        try:
            records = self.client.query_records(query_filter=VISIBLE_UPCOMING_FILTER)
        except NotionApiError as e:
            logger.error(f"❌ Error updating event statuses in Notion: {e}")
            return StatusUpdateResult()

        result = self.update_lapsed(records)

        if result.candidates:
            logger.info(
                f'✅ Updated Status to "{STATUS_PAST}" for {result.updated} '
                f'event(s) in Notion'
            )
        else:
            logger.info("✅ No events need status updates")
        return result

    def reconcile_statuses(self, records: List[RemoteRecord]) -> int:
        """
        Mark passed Upcoming records as Past.

        Args:
            records: Records to inspect

        Returns:
            Number of records successfully updated
        """
        return self.update_lapsed(records).updated

    def update_lapsed(self, records: List[RemoteRecord]) -> StatusUpdateResult:
        """
        Issue concurrent status updates for every lapsed Upcoming record.

        Failures are logged per page and do not stop the other updates.

        Args:
            records: Records to inspect

        Returns:
            StatusUpdateResult with candidate, success and failure counts
        """
        current_day = self.clock()
        lapsed = [r for r in records if is_lapsed_upcoming(r, current_day)]
        result = StatusUpdateResult(candidates=len(lapsed))
        if not lapsed:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = []
            for record in lapsed:
                logger.info(
                    f'   📅 Updating "{record.title}" ({record.date_start}) '
                    f'from {STATUS_UPCOMING} → {STATUS_PAST}'
                )
                futures.append(
                    (record, executor.submit(
                        self.client.update_status, record.page_id, STATUS_PAST
                    ))
                )

            for record, future in futures:
                error = self._wait(future)
                if error is None:
                    result.updated += 1
                else:
                    logger.error(
                        f"   ❌ Failed to update page {record.page_id}: {error}"
                    )
                    result.failed.append(record.page_id)

        return result

    @staticmethod
    def _wait(future) -> Optional[Exception]:
        try:
            future.result()
        except NotionApiError as e:
            return e
        return None
