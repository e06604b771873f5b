"""Content fingerprinting for the published events collection."""
import hashlib
import json
import logging
from typing import List, Optional

from processor.models import Event

logger = logging.getLogger(__name__)


def serialize_events(events: List[Event], pretty: bool = False) -> str:
    """
    Serialize events to JSON, keeping the key order produced by the mapper.

    Args:
        events: Events to serialize
        pretty: Indent the output for publication

    Returns:
        JSON text
    """
    if pretty:
        return json.dumps(events, indent=2, ensure_ascii=False)
    return json.dumps(events, separators=(',', ':'), ensure_ascii=False)


def compute_events_hash(events: List[Event]) -> str:
    """
    Compute the SHA256 digest of an events collection.

    Args:
        events: Events in publication order

    Returns:
        Hex digest of the compact JSON serialization
    """
    content = serialize_events(events)
    return hashlib.sha256(content.encode('utf-8')).hexdigest()


def hash_published_artifact(content: Optional[str]) -> Optional[str]:
    """
    Compute the digest of a previously published events.json.

    Args:
        content: Raw artifact text, or None if there is no artifact

    Returns:
        Hex digest, or None if the artifact is missing or not valid JSON
    """
    if content is None:
        return None

    try:
        events = json.loads(content)
    except ValueError as e:
        logger.warning(f"⚠️  Existing events file is not valid JSON, ignoring it: {e}")
        return None

    return compute_events_hash(events)


def should_publish(new_digest: str, previous_digest: Optional[str]) -> bool:
    """True when there is no previous digest or the content changed."""
    return previous_digest is None or new_digest != previous_digest
