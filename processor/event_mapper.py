"""Mapper from Notion pages to flat event objects."""
import logging
from typing import List

from processor.dates import format_date_pretty
from processor.models import Event, RemoteRecord
from processor.property_extractor import extract_property_value

logger = logging.getLogger(__name__)


class EventMapper:
    """Maps Notion event pages to the objects published in events.json."""

    # Venue data is secret and never leaves Notion
    EXCLUDED_PROPERTIES = frozenset([
        'Location',
        'Place Name',
        'Place Link',
        'Visible on site',
    ])
    VENUE_KEYS = ('Place Name', 'Place Link', 'Place')

    def map_records(self, records: List[RemoteRecord]) -> List[Event]:
        """
        Map a list of records, tracing the property names of the first one.

        Args:
            records: Records in publication order

        Returns:
            List of mapped events, same order
        """
        return [
            self.map_record(record, debug=(index == 0))
            for index, record in enumerate(records)
        ]

    def map_record(self, record: RemoteRecord, debug: bool = False) -> Event:
        """
        Map a single Notion page to an event.

        Args:
            record: RemoteRecord to map
            debug: Log the available property names and types

        Returns:
            Event dict with every non-null, non-excluded property
        """
        props = record.properties
        event: Event = {}

        if debug:
            logger.debug("📋 Available properties in Notion:")
            for key, prop in props.items():
                logger.debug(f'  - "{key}" (type: {(prop or {}).get("type")})')

        for key, prop in props.items():
            if key in self.EXCLUDED_PROPERTIES:
                if debug:
                    logger.debug(f'   ⏭️  Skipping excluded property: "{key}"')
                continue

            value = extract_property_value(prop)
            if value is not None:
                event[key] = value

        for key in self.VENUE_KEYS:
            event.pop(key, None)

        date_value = event.get('Date') or event.get('date')
        if date_value:
            pretty = format_date_pretty(date_value)
            if pretty:
                event['datePretty'] = pretty

        return event

    def filter_publishable(self, events: List[Event]) -> List[Event]:
        """
        Drop events that lack a name or a date.

        Args:
            events: Mapped events

        Returns:
            Events carrying both a name and a date
        """
        valid_events = []
        for event in events:
            name = event.get('Name') or event.get('name')
            event_date = event.get('Date') or event.get('date')
            if not name or not event_date:
                logger.warning(
                    f"⚠️  Skipping event without name or date: "
                    f"{name or 'Unknown'}"
                )
                continue
            valid_events.append(event)
        return valid_events
