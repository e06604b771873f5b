"""Fetches events from the Notion events database into events.json.

Also moves Upcoming events whose date has passed to Past in Notion. The
integration needs write access to the database for the status updates.
"""
import logging
import sys
from typing import Optional

from log_config import setup_logging
from settings import ConfigurationError, Settings, load_env_file, load_settings
from source.notion_database import NotionApiError, NotionDatabaseClient
from sync.orchestrator import SyncOrchestrator
from sync.status_updater import StatusUpdater

logger = logging.getLogger(__name__)

ERROR_HINTS = {
    'object_not_found': (
        "Check that NOTION_EVENTS_DATABASE is correct and the integration "
        "has access to the database."
    ),
    'unauthorized': (
        "Check that NOTION_API_KEY is correct and the integration is active."
    ),
}


def build_client(settings: Settings) -> NotionDatabaseClient:
    """Notion client for the configured events database."""
    return NotionDatabaseClient(
        settings.notion_api_key,
        settings.database_id,
        timeout=settings.timeout_seconds
    )


def build_orchestrator(settings: Settings,
                       client: Optional[NotionDatabaseClient] = None) -> SyncOrchestrator:
    """
    Wire the Notion client, storage and sync components together.

    Args:
        settings: Loaded settings
        client: Client to reuse (default: a new one from settings)
    """
    client = client or build_client(settings)
    return SyncOrchestrator(
        client,
        settings.build_store(),
        status_updater=StatusUpdater(client, max_workers=settings.max_workers),
        settle_delay=settings.settle_delay_seconds
    )


def log_notion_error(error: NotionApiError) -> None:
    """Log a failed sync, with a hint for well-known Notion error codes."""
    logger.error(f"❌ Error fetching events from Notion: {error}")
    hint = ERROR_HINTS.get(error.code)
    if hint:
        logger.error(f"   Hint: {hint}")


def main() -> int:
    """
    Run a full sync.

    Returns:
        0 on success (published or unchanged), 1 on failure
    """
    load_env_file()
    setup_logging()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"❌ Error: {e}")
        return 1

    setup_logging(settings.log_level)

    try:
        build_orchestrator(settings).run()
    except NotionApiError as e:
        log_notion_error(e)
        return 1
    except Exception as e:
        logger.error(f"❌ Error fetching events from Notion: {e}", exc_info=True)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
