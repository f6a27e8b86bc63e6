"""Date and time parsing utilities for calendar tool output."""

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as dateutil_parser

from icalshare.config.constants import TOOL_DATE_FORMAT

# ISO-8601 date followed by a time component
ISO_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T")

# "Monday, " prefix the legacy tool puts in front of dates
WEEKDAY_PREFIX_PATTERN = re.compile(r"^[A-Za-z]+,\s*")

# The literal " at " between the date and the time
AT_SEPARATOR_PATTERN = re.compile(r"\s+at\s+", re.IGNORECASE)


def format_tool_date(value: datetime) -> str:
    """Format a datetime the way the calendar tool expects it on argv.

    Always MM/DD/YYYY HH:MM:SS, zero padded, independent of locale.
    """
    return value.strftime(TOOL_DATE_FORMAT)


def clean_locale_date(date_str: str) -> str:
    """Strip the weekday prefix and the literal "at" from a locale date string.

    >>> clean_locale_date("Monday, July 8, 2024 at 9:00:00 AM")
    'July 8, 2024 9:00:00 AM'
    """
    cleaned = WEEKDAY_PREFIX_PATTERN.sub("", date_str.strip())
    return AT_SEPARATOR_PATTERN.sub(" ", cleaned)


def parse_tool_timestamp(value: str) -> Optional[datetime]:
    """Parse a timestamp emitted by the calendar tool.

    Accepts ISO-8601 instants ("2024-07-08T09:00:00", with or without offset)
    and locale strings such as "Monday, July 8, 2024 at 9:00:00 AM".

    Args:
        value: Raw timestamp text.

    Returns:
        The parsed datetime (naive when the input has no offset) or None if the
        value cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        if ISO_TIMESTAMP_PATTERN.match(text):
            return dateutil_parser.isoparse(text)
        return dateutil_parser.parse(clean_locale_date(text))
    except (ValueError, OverflowError):
        return None


def parse_bool(value) -> bool:
    """Interpret the all-day flag, which older tools send as a string."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def start_of_week(reference: datetime) -> datetime:
    """Return Monday 00:00 of the week containing ``reference``."""
    monday = reference.date() - timedelta(days=reference.weekday())
    return datetime.combine(monday, time.min)


def next_day(value: date) -> date:
    """Return the calendar day after ``value``."""
    return value + timedelta(days=1)
