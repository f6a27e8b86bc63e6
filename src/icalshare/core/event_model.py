"""Event data model for exported calendar events."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from icalshare.config.constants import DEFAULT_CALENDAR_NAME, DEFAULT_EVENT_TITLE
from icalshare.core.timezone_utils import attach_timezone
from icalshare.exceptions.errors import InvalidRangeError, SkippedEventWarning
from icalshare.utils.date_parsing import parse_bool, parse_tool_timestamp, start_of_week


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class DateRange:
    """Half-open interval [start, end) of timezone-aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise InvalidRangeError(self.start, self.end)

    @classmethod
    def current_week(cls, tzinfo, now: Optional[datetime] = None) -> "DateRange":
        """Monday 00:00 up to the following Monday 00:00 in ``tzinfo``.

        Args:
            tzinfo: Timezone the week boundaries are computed in.
            now: Reference instant (default: current time).

        Returns:
            The DateRange covering the week containing ``now``.
        """
        if now is None:
            now = datetime.now(tzinfo)
        elif now.tzinfo is not None:
            now = now.astimezone(tzinfo)
        monday = start_of_week(now)
        return cls(
            start=attach_timezone(tzinfo, monday),
            end=attach_timezone(tzinfo, monday + timedelta(days=7)),
        )

    @classmethod
    def from_naive(cls, start: datetime, end: datetime, tzinfo) -> "DateRange":
        """Build a range from wall-clock datetimes in ``tzinfo``."""
        return cls(start=attach_timezone(tzinfo, start), end=attach_timezone(tzinfo, end))


@dataclass
class NormalizedEvent:
    """One calendar entry as reported by the calendar tool."""

    calendar_name: str
    title: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    location: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], tzinfo) -> "NormalizedEvent":
        """Create an event from a raw tool record.

        Naive timestamps are interpreted in ``tzinfo``.

        Args:
            data: Record with calendar, title, startDate, endDate, isAllDay,
                location and notes keys.
            tzinfo: Timezone for timestamps without an offset.

        Returns:
            A validated NormalizedEvent.

        Raises:
            ValueError: If start or end is missing, unparsable, or out of order.
        """
        start = parse_tool_timestamp(data.get("startDate"))
        if start is None:
            raise ValueError(f"unparsable start date {data.get('startDate')!r}")
        end = parse_tool_timestamp(data.get("endDate"))
        if end is None:
            raise ValueError(f"unparsable end date {data.get('endDate')!r}")

        start = attach_timezone(tzinfo, start)
        end = attach_timezone(tzinfo, end)
        if end < start:
            raise ValueError(f"end {end.isoformat()} is before start {start.isoformat()}")

        return cls(
            calendar_name=_optional_text(data.get("calendar")) or DEFAULT_CALENDAR_NAME,
            title=_optional_text(data.get("title")) or DEFAULT_EVENT_TITLE,
            start=start,
            end=end,
            is_all_day=parse_bool(data.get("isAllDay", False)),
            location=_optional_text(data.get("location")),
            notes=_optional_text(data.get("notes")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the tool's record shape."""
        result = {
            "calendar": self.calendar_name,
            "title": self.title,
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
            "isAllDay": self.is_all_day,
        }
        if self.location:
            result["location"] = self.location
        if self.notes:
            result["notes"] = self.notes
        return result


@dataclass
class ExportBatch:
    """The events of one export run, sorted by start time."""

    date_range: DateRange
    events: List[NormalizedEvent] = field(default_factory=list)
    warnings: List[SkippedEventWarning] = field(default_factory=list)

    def __post_init__(self):
        # sorted() is stable, so ties keep the tool's order
        self.events = sorted(self.events, key=lambda event: event.start)

    @property
    def count(self) -> int:
        return len(self.events)
