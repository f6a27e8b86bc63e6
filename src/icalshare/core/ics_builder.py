"""ICS document building for an export batch."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pytz
from icalendar import Calendar, Event, vText

from icalshare.config.constants import (
    ICS_CALNAME,
    ICS_CALSCALE,
    ICS_METHOD,
    ICS_PRODID,
    ICS_VERSION,
    UID_NAMESPACE,
)
from icalshare.core.event_model import ExportBatch, NormalizedEvent
from icalshare.core.timezone_utils import to_utc
from icalshare.utils.date_parsing import next_day

logger = logging.getLogger(__name__)


@dataclass
class ICSSummary:
    """Events found when re-reading an ICS document."""

    event_count: int
    uids: List[str]
    spans: List[Tuple[Union[date, datetime], Union[date, datetime]]]


def make_uid(run_timestamp: int, index: int, namespace: str = UID_NAMESPACE) -> str:
    """Build the UID of the ``index``-th event of a run."""
    return f"{run_timestamp}-{index}@{namespace}"


def build_description(event: NormalizedEvent) -> str:
    """Calendar name, then the notes after a blank line when there are any."""
    description = f"Calendar: {event.calendar_name}"
    if event.notes:
        description = f"{description}\n\n{event.notes}"
    return description


def all_day_span(event: NormalizedEvent) -> Tuple[date, date]:
    """Return (DTSTART, exclusive DTEND) dates for an all-day event.

    An end at midnight already marks the exclusive boundary; any other end time
    means the last covered day is the end's date.
    """
    start_day = event.start.date()
    end_day = event.end.date()
    if event.end.time() != time.min:
        end_day = next_day(end_day)
    return start_day, max(end_day, next_day(start_day))


def _create_ics_calendar(calendar_name: str) -> Calendar:
    """Create a new ICS calendar with standard headers."""
    cal = Calendar()
    cal.add("PRODID", ICS_PRODID)
    cal.add("VERSION", ICS_VERSION)
    cal.add("CALSCALE", ICS_CALSCALE)
    cal.add("METHOD", ICS_METHOD)
    cal.add("X-WR-CALNAME", vText(calendar_name))
    return cal


def _create_ics_event(event: NormalizedEvent, uid: str, stamp: datetime) -> Event:
    """Create an ICS event component."""
    ve = Event()
    ve.add("UID", uid)
    ve.add("DTSTAMP", stamp)

    if event.is_all_day:
        start_day, end_day = all_day_span(event)
        ve.add("DTSTART", start_day)
        ve.add("DTEND", end_day)
    else:
        ve.add("DTSTART", to_utc(event.start))
        ve.add("DTEND", to_utc(event.end))

    ve.add("SUMMARY", vText(event.title))
    ve.add("DESCRIPTION", vText(build_description(event)))
    if event.location:
        ve.add("LOCATION", vText(event.location))
    return ve


def build_calendar(
    batch: ExportBatch,
    run_timestamp: Optional[int] = None,
    namespace: str = UID_NAMESPACE,
    calendar_name: str = ICS_CALNAME,
) -> Calendar:
    """Build an icalendar Calendar with one VEVENT per event in the batch.

    Args:
        batch: Events to export, already sorted.
        run_timestamp: Millisecond timestamp used in UIDs (default: now).
        namespace: Domain part of each UID.
        calendar_name: Display name for subscribing apps.

    Returns:
        The populated Calendar.
    """
    now = datetime.now(pytz.utc)
    stamp = now.replace(microsecond=0)
    if run_timestamp is None:
        run_timestamp = int(now.timestamp() * 1000)

    cal = _create_ics_calendar(calendar_name)
    for index, event in enumerate(batch.events):
        cal.add_component(_create_ics_event(event, make_uid(run_timestamp, index, namespace), stamp))
        logger.debug("Added event: %s (%s)", event.title, event.start.strftime("%b %d, %I:%M %p"))
    return cal


def _format_ics_output(cal: Calendar) -> bytes:
    """Serialize the calendar with CRLF line endings per RFC 5545."""
    raw_ical = cal.to_ical()
    return raw_ical.replace(b"\r\n", b"\n").replace(b"\n", b"\r\n")


def render_ics(batch: ExportBatch, **kwargs) -> bytes:
    """Render the batch as ICS bytes; keyword arguments go to build_calendar."""
    return _format_ics_output(build_calendar(batch, **kwargs))


def write_ics(batch: ExportBatch, output_path: Union[str, Path], **kwargs) -> Path:
    """Write the batch to ``output_path``, replacing any existing file.

    Args:
        batch: Events to export.
        output_path: Destination .ics path.
        **kwargs: Passed to build_calendar.

    Returns:
        The path written.
    """
    path = Path(output_path)
    data = render_ics(batch, **kwargs)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Calendar exported to %s (%d event(s))", path, batch.count)
    return path


def _event_span(component) -> Tuple[Union[date, datetime], Union[date, datetime]]:
    """(start, end) of a VEVENT; DURATION or DTSTART stand in for a missing DTEND."""
    start = component.decoded("DTSTART")
    if component.get("DTEND") is not None:
        return start, component.decoded("DTEND")
    if component.get("DURATION") is not None:
        return start, start + component.decoded("DURATION")
    return start, start


def summarize_ics(data: Union[str, bytes]) -> ICSSummary:
    """Re-parse an ICS document and list what it contains.

    Args:
        data: ICS content.

    Returns:
        ICSSummary with event count, UIDs and (start, end) values.

    Raises:
        ValueError: If the document or one of its events cannot be parsed.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    try:
        cal = Calendar.from_ical(raw)
    except Exception as exc:
        raise ValueError(f"Failed to parse ICS payload: {exc}") from exc

    uids = []
    spans = []
    for component in cal.walk("VEVENT"):
        uid = str(component.get("UID"))
        try:
            spans.append(_event_span(component))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Event {uid} has unreadable dates: {exc}") from exc
        uids.append(uid)
    return ICSSummary(event_count=len(uids), uids=uids, spans=spans)
