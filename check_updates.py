"""Checks whether the Notion events database needs to be synced.

Exits with code 0 if a fetch is needed and 1 if it can be skipped, so a
scheduled workflow can run the fetch step conditionally. Any other exit code
means the check itself failed; callers should fetch in that case.
"""
import logging
import sys

from log_config import setup_logging
from settings import ConfigurationError, load_env_file, load_settings
from source.notion_database import NotionDatabaseClient
from sync.staleness_checker import EXIT_FETCH_NEEDED, EXIT_SKIP, StalenessChecker

logger = logging.getLogger(__name__)


def main() -> int:
    """
    Run the staleness check.

    Returns:
        EXIT_FETCH_NEEDED or EXIT_SKIP
    """
    load_env_file()
    setup_logging()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.warning(f"⚠️  Missing credentials, will fetch to be safe ({e})")
        return EXIT_FETCH_NEEDED

    setup_logging(settings.log_level)

    try:
        client = NotionDatabaseClient(
            settings.notion_api_key,
            settings.database_id,
            timeout=settings.timeout_seconds
        )
        checker = StalenessChecker(client, settings.build_store())
        report = checker.check()
    except Exception as e:
        logger.error(f"❌ Error checking database: {e}", exc_info=True)
        return EXIT_FETCH_NEEDED

    return EXIT_FETCH_NEEDED if report.needs_sync else EXIT_SKIP


if __name__ == '__main__':
    sys.exit(main())
