"""Date parsing and formatting helpers for Notion timestamps."""
from datetime import date, datetime
from typing import Optional

MONTH_ABBREVIATIONS = (
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec'
)


def parse_notion_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Notion date or timestamp string into an aware local datetime.

    Date-only values ("2025-11-12") and timestamps without an offset are
    read as local time, so a date-only value stays on its calendar day.

    Args:
        value: ISO 8601 date or datetime string

    Returns:
        Datetime in the local timezone, or None if the value cannot be parsed
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    return parsed.astimezone()


def local_day(value: Optional[str]) -> Optional[date]:
    """Calendar day, in local time, of a Notion date string."""
    parsed = parse_notion_datetime(value)
    return parsed.date() if parsed else None


def today() -> date:
    """Current local calendar day."""
    return datetime.now().astimezone().date()


def format_date_pretty(value: Optional[str]) -> Optional[str]:
    """
    Format a Notion date as "D Mon YYYY HH:MM" (e.g. "12 Nov 2025 19:00").

    Args:
        value: ISO 8601 date or datetime string

    Returns:
        Formatted string in local time, or None if the value is missing or invalid
    """
    parsed = parse_notion_datetime(value)
    if parsed is None:
        return None

    month = MONTH_ABBREVIATIONS[parsed.month - 1]
    return f"{parsed.day} {month} {parsed.year:04d} {parsed:%H:%M}"
