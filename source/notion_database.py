"""Client for the Notion events database REST API."""
import logging
from typing import Any, Dict, List, Optional

import requests

from processor.models import RemoteRecord

logger = logging.getLogger(__name__)

VISIBLE_PROPERTY = 'Visible on site'
STATUS_PROPERTY = 'Status'
DATE_PROPERTY = 'Date'
STATUS_UPCOMING = 'Upcoming'
STATUS_PAST = 'Past'

VISIBLE_FILTER = {
    'property': VISIBLE_PROPERTY,
    'checkbox': {'equals': True}
}

VISIBLE_UPCOMING_FILTER = {
    'and': [
        VISIBLE_FILTER,
        {
            'property': STATUS_PROPERTY,
            'status': {'equals': STATUS_UPCOMING}
        }
    ]
}

DATE_ASCENDING = [{'property': DATE_PROPERTY, 'direction': 'ascending'}]


class NotionApiError(RuntimeError):
    """Error returned by, or while talking to, the Notion API."""

    def __init__(self, message: str, status: Optional[int] = None,
                 code: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.code = code


class NotionDatabaseClient:
    """Thin client over the Notion REST API, bound to one database."""

    BASE_URL = "https://api.notion.com/v1"
    NOTION_VERSION = "2022-06-28"

    def __init__(
        self,
        api_key: str,
        database_id: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Notion client.

        Args:
            api_key: Notion integration token
            database_id: ID of the events database
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional requests session to reuse
        """
        self.database_id = database_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Notion-Version': self.NOTION_VERSION,
            'Content-Type': 'application/json'
        })

    def _request(self, method: str, path: str,
                 payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Issue a request and return the decoded JSON body.

        Raises:
            NotionApiError: On transport errors, non-2xx responses or
                undecodable bodies
        """
        url = f"{self.BASE_URL}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NotionApiError(f"Request to {path} failed: {e}") from e

        if not response.ok:
            code = None
            message = response.text
            try:
                body = response.json()
                code = body.get('code')
                message = body.get('message') or message
            except ValueError:
                pass
            raise NotionApiError(message, status=response.status_code, code=code)

        try:
            return response.json()
        except ValueError as e:
            raise NotionApiError(
                f"Invalid JSON response from {path}: {e}",
                status=response.status_code
            ) from e

    def query_page(
        self,
        query_filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Query a single page of database results.

        Returns:
            Raw query response with 'results', 'has_more' and 'next_cursor'
        """
        payload: Dict[str, Any] = {}
        if query_filter:
            payload['filter'] = query_filter
        if sorts:
            payload['sorts'] = sorts
        if start_cursor:
            payload['start_cursor'] = start_cursor
        if page_size:
            payload['page_size'] = page_size

        return self._request(
            'POST', f"/databases/{self.database_id}/query", payload
        )

    def query_records(
        self,
        query_filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None
    ) -> List[RemoteRecord]:
        """
        Query every matching record, following pagination cursors.

        Args:
            query_filter: Notion filter object
            sorts: Notion sort list

        Returns:
            All matching records in query order
        """
        records: List[RemoteRecord] = []
        cursor = None

        while True:
            response = self.query_page(
                query_filter=query_filter, sorts=sorts, start_cursor=cursor
            )
            records.extend(
                RemoteRecord.from_page(page)
                for page in response.get('results', [])
            )
            cursor = response.get('next_cursor')
            if not response.get('has_more') or not cursor:
                break

        logger.debug(f"Queried {len(records)} records from database")
        return records

    def retrieve_database(self) -> Dict[str, Any]:
        """Retrieve the database object (metadata and schema)."""
        return self._request('GET', f"/databases/{self.database_id}")

    def get_last_edited_time(self) -> Optional[str]:
        """Last edited timestamp of the database, as reported by Notion."""
        return self.retrieve_database().get('last_edited_time')

    def update_status(self, page_id: str, status: str) -> Dict[str, Any]:
        """
        Set the Status property of a page.

        Args:
            page_id: ID of the page to update
            status: Status option name (e.g. "Past")

        Returns:
            Updated page object
        """
        payload = {
            'properties': {
                STATUS_PROPERTY: {'status': {'name': status}}
            }
        }
        return self._request('PATCH', f"/pages/{page_id}", payload)
