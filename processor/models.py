"""Data models for the Notion events sync."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# A published event is a flat mapping of property name to extracted value.
Event = Dict[str, Any]


@dataclass
class RemoteRecord:
    """A page from the Notion events database."""
    page_id: str
    properties: Dict[str, Dict[str, Any]]
    last_edited_time: Optional[str] = None

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> 'RemoteRecord':
        """
        Build a record from a Notion page object.

        Args:
            page: Page JSON as returned by the Notion API

        Returns:
            RemoteRecord wrapping the page properties
        """
        return cls(
            page_id=page.get('id', ''),
            properties=page.get('properties') or {},
            last_edited_time=page.get('last_edited_time')
        )

    def get_property(self, *names: str) -> Optional[Dict[str, Any]]:
        """Return the first property present under any of the given names."""
        for name in names:
            prop = self.properties.get(name)
            if prop:
                return prop
        return None

    @property
    def title(self) -> str:
        """Plain text of the first span of the Name title, for log lines."""
        prop = self.get_property('Name', 'name')
        spans = (prop or {}).get('title') or []
        if spans:
            return spans[0].get('plain_text') or 'Unknown'
        return 'Unknown'

    @property
    def date_start(self) -> Optional[str]:
        """Start of the Date property, if it is a populated date field."""
        prop = self.get_property('Date', 'date')
        if not prop or prop.get('type') != 'date' or not prop.get('date'):
            return None
        return prop['date'].get('start')


@dataclass
class StatusUpdateResult:
    """Result of reconciling Upcoming statuses against the calendar."""
    candidates: int = 0
    updated: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.updated > 0


@dataclass
class StalenessReport:
    """Outcome of the pre-fetch staleness check."""
    needs_sync: bool
    reason: str
    checkpoint: Optional[str] = None
    remote_last_edited: Optional[str] = None


@dataclass
class SyncResult:
    """Result of a full sync run."""
    published: bool
    event_count: int
    statuses_updated: int
    digest: str
    checkpoint: Optional[str] = None
