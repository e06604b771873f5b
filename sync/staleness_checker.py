"""Decides whether a sync run has any work to do."""
import logging
from datetime import date
from typing import Callable, Optional

from processor.dates import parse_notion_datetime, today
from processor.models import RemoteRecord, StalenessReport
from source.notion_database import (
    NotionApiError,
    NotionDatabaseClient,
    VISIBLE_UPCOMING_FILTER,
)
from storage.artifact_store import ArtifactStore
from sync.status_updater import has_date_passed

logger = logging.getLogger(__name__)

EXIT_FETCH_NEEDED = 0
EXIT_SKIP = 1


def is_remote_newer(checkpoint: Optional[str],
                    remote_last_edited: Optional[str]) -> bool:
    """
    Compare the remote last-edited time with the checkpoint.

    Missing or unparsable values count as newer.
    """
    checkpoint_time = parse_notion_datetime(checkpoint)
    remote_time = parse_notion_datetime(remote_last_edited)
    if checkpoint_time is None or remote_time is None:
        return True
    return remote_time > checkpoint_time


def needs_sync(checkpoint: Optional[str], remote_last_edited: Optional[str],
               extra_signal: bool = False) -> bool:
    """
    Decide whether a fetch is needed.

    Args:
        checkpoint: Timestamp stored by the last successful sync
        remote_last_edited: Database last edited time, None if unknown
        extra_signal: True if an Upcoming event's date has passed

    Returns:
        True unless the checkpoint is current and nothing has lapsed
    """
    if not checkpoint or not remote_last_edited:
        return True
    if is_remote_newer(checkpoint, remote_last_edited):
        return True
    return extra_signal


class StalenessChecker:
    """Checks Notion for edits or lapsed events since the last sync."""

    LAPSED_SCAN_PAGE_SIZE = 10

    def __init__(
        self,
        client: NotionDatabaseClient,
        store: ArtifactStore,
        clock: Callable[[], date] = today
    ):
        self.client = client
        self.store = store
        self.clock = clock

    def get_remote_last_edited(self) -> Optional[str]:
        """Database last edited time, or None if it cannot be retrieved."""
        try:
            return self.client.get_last_edited_time()
        except NotionApiError as e:
            logger.warning(f"⚠️  Could not retrieve database metadata: {e}")
            return None

    def has_lapsed_upcoming_events(self) -> bool:
        """
        Scan a few visible Upcoming events for one whose date has passed.

        Passing dates do not change the database last edited time, so this
        catches status updates that are due without any edit in Notion.

        Returns:
            True if a lapsed event was found or the scan failed
        """
        try:
            response = self.client.query_page(
                query_filter=VISIBLE_UPCOMING_FILTER,
                page_size=self.LAPSED_SCAN_PAGE_SIZE
            )
        except NotionApiError as e:
            logger.warning(
                f"⚠️  Could not check for date-based status changes: {e}"
            )
            return True

        current_day = self.clock()
        for page in response.get('results', []):
            record = RemoteRecord.from_page(page)
            if has_date_passed(record, current_day):
                logger.info(
                    f"🔄 Found Upcoming event with date that passed: "
                    f'"{record.title}" ({record.date_start})'
                )
                return True
        return False

    def check(self) -> StalenessReport:
        """
        Run the full staleness check.

        Returns:
            StalenessReport with the decision and its reason
        """
        checkpoint = self.store.read_checkpoint()
        remote_last_edited = self.get_remote_last_edited()

        extra_signal = False
        if not checkpoint:
            reason = "No previous sync found, fetch needed"
        elif not remote_last_edited:
            reason = "Could not check database timestamp, fetch needed"
        elif is_remote_newer(checkpoint, remote_last_edited):
            reason = "Database updated since last sync, fetch needed"
        else:
            extra_signal = self.has_lapsed_upcoming_events()
            if extra_signal:
                reason = "Events with dates that passed found, fetch needed for status updates"
            else:
                reason = "Database not updated and no date-based status changes, skip fetch"

        report = StalenessReport(
            needs_sync=needs_sync(checkpoint, remote_last_edited, extra_signal),
            reason=reason,
            checkpoint=checkpoint,
            remote_last_edited=remote_last_edited
        )

        glyph = "🔄" if report.needs_sync else "✅"
        logger.info(f"{glyph} {report.reason}")
        logger.info(f"   Last sync: {checkpoint}")
        logger.info(f"   DB last edited: {remote_last_edited}")
        return report
