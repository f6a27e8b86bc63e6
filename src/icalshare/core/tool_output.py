"""Parsing of the calendar tool's stdout into raw event records.

The tool has shipped two output shapes. The current build prints a JSON
document::

    {"dateRange": {"start": "...", "end": "..."},
     "events": [{"calendar": "Work", "title": "...", "startDate": "...",
                 "endDate": "...", "isAllDay": false,
                 "location": null, "notes": null}],
     "totalCount": 1}

The legacy AppleScript variant prints free text followed by a marker line and
one ``calendar||title||start||end`` record per line. Both are parsed into the
same record dictionaries so nothing downstream cares which one produced them.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from icalshare.config.constants import LEGACY_EVENTS_MARKER, LEGACY_FIELD_SEPARATOR
from icalshare.exceptions.errors import ParseError

logger = logging.getLogger(__name__)

LEGACY_FIELD_COUNT = 4


@dataclass(frozen=True)
class JsonToolOutput:
    """Structured output of the current calendar tool."""

    records: List[Dict[str, Any]]
    date_range: Optional[Dict[str, str]] = None
    total_count: Optional[int] = None


@dataclass(frozen=True)
class DelimitedToolOutput:
    """Line-oriented output of the legacy AppleScript tool."""

    records: List[Dict[str, Any]]
    malformed_lines: List[str] = field(default_factory=list)


ToolOutput = Union[JsonToolOutput, DelimitedToolOutput]


def parse_tool_output(stdout: str, legacy: bool = False) -> ToolOutput:
    """Parse the tool's stdout.

    JSON is always tried first. The delimited format is only accepted when the
    tool is the legacy variant.

    Args:
        stdout: Everything the tool printed on standard output.
        legacy: Whether the tool is the legacy AppleScript variant.

    Returns:
        JsonToolOutput or DelimitedToolOutput.

    Raises:
        ParseError: If the output matches neither accepted shape.
    """
    try:
        document = json.loads(stdout)
    except json.JSONDecodeError as exc:
        if legacy:
            return _parse_delimited(stdout)
        raise ParseError(f"invalid JSON ({exc.msg} at line {exc.lineno})", stdout) from exc

    return _parse_json_document(document, stdout)


def _parse_json_document(document: Any, raw: str) -> JsonToolOutput:
    if not isinstance(document, dict):
        raise ParseError("expected a JSON object at the top level", raw)

    events = document.get("events")
    if not isinstance(events, list):
        raise ParseError("missing 'events' array", raw)

    records = []
    for index, event in enumerate(events):
        if not isinstance(event, dict):
            raise ParseError(f"event {index} is not an object", raw)
        records.append(event)

    total_count = document.get("totalCount")
    if isinstance(total_count, int) and total_count != len(records):
        logger.warning(
            "Calendar tool reported totalCount=%d but returned %d event(s)",
            total_count, len(records)
        )

    date_range = document.get("dateRange")
    return JsonToolOutput(
        records=records,
        date_range=date_range if isinstance(date_range, dict) else None,
        total_count=total_count if isinstance(total_count, int) else None,
    )


def _parse_delimited(stdout: str) -> DelimitedToolOutput:
    # Anything before the marker is progress chatter from the script
    _, marker, tail = stdout.partition(LEGACY_EVENTS_MARKER)
    body = tail if marker else stdout

    records = []
    malformed = []
    for line in body.splitlines():
        line = line.strip()
        if not line or LEGACY_FIELD_SEPARATOR not in line:
            continue
        parts = [part.strip() for part in line.split(LEGACY_FIELD_SEPARATOR)]
        if len(parts) != LEGACY_FIELD_COUNT:
            malformed.append(line)
            continue
        calendar, title, start, end = parts
        records.append({
            "calendar": calendar,
            "title": title,
            "startDate": start,
            "endDate": end,
            "isAllDay": False,
        })

    if not records and not malformed:
        logger.warning("No events found in the calendar tool output")
    return DelimitedToolOutput(records=records, malformed_lines=malformed)
