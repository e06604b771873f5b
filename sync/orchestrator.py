"""Sync run: Notion events database to the published events.json."""
import logging
import time
from typing import Callable, Optional

from processor.change_detector import (
    compute_events_hash,
    hash_published_artifact,
    serialize_events,
    should_publish,
)
from processor.event_mapper import EventMapper
from processor.models import StatusUpdateResult, SyncResult
from source.notion_database import (
    DATE_ASCENDING,
    NotionApiError,
    NotionDatabaseClient,
    VISIBLE_FILTER,
)
from storage.artifact_store import ArtifactStore
from sync.status_updater import StatusUpdater

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Runs status reconciliation, fetch, mapping and publication."""

    def __init__(
        self,
        client: NotionDatabaseClient,
        store: ArtifactStore,
        status_updater: Optional[StatusUpdater] = None,
        mapper: Optional[EventMapper] = None,
        settle_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Notion client shared by every component
            store: Where the artifact and checkpoint are kept
            status_updater: Status reconciler (default: built from client)
            mapper: Page to event mapper (default: EventMapper())
            settle_delay: Seconds to wait after status updates
            sleep: Sleep function
        """
        self.client = client
        self.store = store
        self.status_updater = status_updater or StatusUpdater(client)
        self.mapper = mapper or EventMapper()
        self.settle_delay = settle_delay
        self.sleep = sleep

    def _get_remote_last_edited(self) -> Optional[str]:
        try:
            return self.client.get_last_edited_time()
        except NotionApiError as e:
            logger.warning(
                f"⚠️  Could not retrieve database metadata, proceeding with fetch: {e}"
            )
            return None

    def _write_checkpoint(self, remote_last_edited: Optional[str]) -> None:
        if remote_last_edited:
            self.store.write_checkpoint(remote_last_edited)
            logger.info(f"✅ Updated sync timestamp: {remote_last_edited}")

    def run(self) -> SyncResult:
        """
        Execute a full sync run.

        Returns:
            SyncResult describing what was published

        Raises:
            NotionApiError: If the events query fails
        """
        logger.info("🔄 Fetching events from Notion...")

        status_result: StatusUpdateResult = self.status_updater.reconcile()
        if status_result.changed:
            logger.info("⏳ Waiting for Notion to process status updates...")
            self.sleep(self.settle_delay)

        remote_last_edited = self._get_remote_last_edited()

        records = self.client.query_records(
            query_filter=VISIBLE_FILTER, sorts=DATE_ASCENDING
        )
        logger.info(f"✅ Found {len(records)} visible events")

        events = self.mapper.filter_publishable(self.mapper.map_records(records))
        logger.info(f"✅ Mapped {len(events)} valid events")

        new_digest = compute_events_hash(events)
        previous_digest = hash_published_artifact(self.store.read_events())

        result = SyncResult(
            published=False,
            event_count=len(events),
            statuses_updated=status_result.updated,
            digest=new_digest,
            checkpoint=remote_last_edited
        )

        if not should_publish(new_digest, previous_digest):
            logger.info("ℹ️  Events content unchanged, no update needed.")
            self._write_checkpoint(remote_last_edited)
            return result

        location = self.store.write_events(serialize_events(events, pretty=True))
        logger.info(f"✅ Successfully wrote {len(events)} events to {location}")
        self._write_checkpoint(remote_last_edited)

        result.published = True
        logger.info("🎉 Done!")
        return result
