"""AWS Lambda handler for the Notion events sync."""
import json
import logging
import time
from typing import Dict, Any

from fetch_events import ERROR_HINTS, build_client, build_orchestrator
from log_config import setup_logging
from settings import ConfigurationError, load_settings
from source.notion_database import NotionApiError
from sync.staleness_checker import StalenessChecker


def _error_response(message: str, error: Exception, start_time: float,
                    **extra: Any) -> Dict[str, Any]:
    duration = time.time() - start_time
    body = {
        'message': message,
        'error': str(error),
        'error_type': type(error).__name__,
        'duration_seconds': round(duration, 2)
    }
    body.update(extra)
    return {'statusCode': 500, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the Notion events sync.

    Runs the staleness check first and skips the sync when nothing changed,
    unless the event payload sets "force": true.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    start_time = time.time()
    setup_logging(json_format=True)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"❌ Error: {e}")
        return _error_response('Missing configuration', e, start_time)

    setup_logging(settings.log_level, json_format=True)
    force = bool((event or {}).get('force'))
    logger.info(
        "Lambda execution started",
        extra={
            'database_id': settings.database_id,
            'artifact_bucket': settings.artifact_bucket,
            'force': force
        }
    )

    client = build_client(settings)

    if not force:
        try:
            report = StalenessChecker(client, settings.build_store()).check()
        except Exception as e:
            # A failed check means sync anyway
            logger.warning(f"⚠️  Staleness check failed, syncing: {e}")
        else:
            if not report.needs_sync:
                duration = time.time() - start_time
                return {
                    'statusCode': 200,
                    'body': json.dumps({
                        'message': 'Sync skipped',
                        'reason': report.reason,
                        'duration_seconds': round(duration, 2)
                    })
                }

    try:
        result = build_orchestrator(settings, client).run()
    except NotionApiError as e:
        logger.error(
            f"❌ Error fetching events from Notion: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        extra = {}
        if e.code in ERROR_HINTS:
            extra['hint'] = ERROR_HINTS[e.code]
        return _error_response('Failed to fetch events from Notion', e,
                               start_time, **extra)
    except Exception as e:
        logger.error(
            f"❌ Sync failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Sync failed', e, start_time)

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed successfully",
        extra={
            'duration_seconds': round(duration, 2),
            'published': result.published,
            'event_count': result.event_count,
            'statuses_updated': result.statuses_updated
        }
    )

    return {
        'statusCode': 200,
        'body': json.dumps({
            'message': 'Sync completed successfully',
            'statistics': {
                'published': result.published,
                'event_count': result.event_count,
                'statuses_updated': result.statuses_updated,
                'digest': result.digest,
                'checkpoint': result.checkpoint,
                'duration_seconds': round(duration, 2)
            }
        })
    }
