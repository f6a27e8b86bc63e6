"""Calendar reader backed by the native calendar-access tool.

The tool is a black box: it takes the start (and optionally end) of the
range on argv, prints events on stdout, diagnostics on stderr, and signals
success with exit status 0.
"""

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Union

from icalshare.config.constants import (
    ACCESS_DENIED_PATTERNS,
    DEFAULT_TIMEZONE,
    LEGACY_SCRIPT_SUFFIXES,
    OSASCRIPT,
    TOOL_CHECK_TIMEOUT_SECONDS,
)
from icalshare.core.event_model import DateRange, ExportBatch, NormalizedEvent
from icalshare.core.timezone_utils import resolve_timezone
from icalshare.core.tool_output import DelimitedToolOutput, ToolOutput, parse_tool_output
from icalshare.exceptions.errors import (
    AccessDeniedError,
    CalendarToolError,
    ICalShareError,
    SkippedEventWarning,
    ToolNotFoundError,
)
from icalshare.utils.date_parsing import format_tool_date
from icalshare.utils.paths import resolve_tool_path

logger = logging.getLogger(__name__)

# Same call shape as subprocess.run
Runner = Callable[..., "subprocess.CompletedProcess[str]"]


@dataclass
class ToolCheckResult:
    """Outcome of a diagnostic run of the calendar tool."""

    ok: bool
    message: str
    event_count: int = 0


def is_access_denied(stderr: str) -> bool:
    """Check whether the tool's diagnostics describe a refused permission."""
    text = (stderr or "").lower()
    return any(pattern in text for pattern in ACCESS_DENIED_PATTERNS)


class CalendarReader:
    """Reads events for a date range by running the calendar tool."""

    def __init__(
        self,
        tool_path: Optional[Union[str, Path]] = None,
        timezone: str = DEFAULT_TIMEZONE,
        runner: Optional[Runner] = None,
        legacy: Optional[bool] = None,
    ):
        """Initialize the reader.

        Args:
            tool_path: Location of the tool; relative paths are resolved
                against the install location.
            timezone: Zone the tool reports naive timestamps in.
            runner: Replacement for subprocess.run (used by tests).
            legacy: Force the legacy AppleScript variant on or off; by default
                it is detected from the file suffix.
        """
        self.tool_path = resolve_tool_path(tool_path)
        self.tzinfo, self.timezone_warning = resolve_timezone(timezone)
        if legacy is None:
            legacy = self.tool_path.suffix.lower() in LEGACY_SCRIPT_SUFFIXES
        self.legacy = legacy
        self._run = runner or subprocess.run

    def build_command(self, date_range: DateRange) -> List[str]:
        """Build the argv for the tool.

        Args:
            date_range: Range to export.

        Returns:
            Command list ready for subprocess.
        """
        start = format_tool_date(date_range.start.astimezone(self.tzinfo))
        if self.legacy:
            # The AppleScript computes the week end itself
            return [OSASCRIPT, str(self.tool_path), start]
        end = format_tool_date(date_range.end.astimezone(self.tzinfo))
        return [str(self.tool_path), start, end]

    def read(self, date_range: DateRange, timeout: Optional[float] = None) -> ExportBatch:
        """Export the events in ``date_range``.

        Args:
            date_range: Half-open range to export.
            timeout: Optional limit in seconds for the tool run.

        Returns:
            ExportBatch with the surviving events sorted by start time.

        Raises:
            ToolNotFoundError: If the tool does not exist.
            AccessDeniedError: If the OS refused calendar access.
            CalendarToolError: If the tool could not run or failed.
            ParseError: If the tool output is malformed.
        """
        if not self.tool_path.exists():
            raise ToolNotFoundError(str(self.tool_path))

        command = self.build_command(date_range)
        logger.info(
            "Fetching events from %s to %s",
            date_range.start.strftime("%b %d"),
            date_range.end.strftime("%b %d, %Y"),
        )
        logger.debug("Running calendar tool: %s", command)

        stdout = self._invoke(command, timeout)
        output = parse_tool_output(stdout, legacy=self.legacy)
        return self._build_batch(date_range, output)

    def check_tool(self, now: Optional[datetime] = None) -> ToolCheckResult:
        """Run the tool once over a single day with a short timeout.

        Never raises for tool problems; they are reported in the result.

        Args:
            now: Reference time (default: current time).

        Returns:
            ToolCheckResult describing what happened.
        """
        now = now or datetime.now(self.tzinfo)
        day_start = now.astimezone(self.tzinfo).replace(
            hour=0, minute=0, second=0, microsecond=0, tzinfo=None
        )
        date_range = DateRange.from_naive(
            day_start, day_start + timedelta(days=1), self.tzinfo
        )

        try:
            batch = self.read(date_range, timeout=TOOL_CHECK_TIMEOUT_SECONDS)
        except ICalShareError as e:
            logger.debug("Calendar tool check failed: %s", e)
            return ToolCheckResult(ok=False, message=str(e))

        return ToolCheckResult(
            ok=True,
            message=f"Calendar tool at {self.tool_path} returned {batch.count} event(s) for today",
            event_count=batch.count,
        )

    def _invoke(self, command: List[str], timeout: Optional[float]) -> str:
        try:
            result = self._run(command, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError as e:
            if self.legacy:
                raise CalendarToolError(f"Could not run {OSASCRIPT}", str(e)) from e
            raise ToolNotFoundError(str(self.tool_path)) from e
        except subprocess.TimeoutExpired as e:
            raise CalendarToolError(
                f"Calendar tool timed out after {timeout:g} seconds"
            ) from e
        except OSError as e:
            raise CalendarToolError(f"Could not execute {self.tool_path}", str(e)) from e

        stderr = result.stderr or ""
        if result.returncode != 0:
            if is_access_denied(stderr):
                raise AccessDeniedError(stderr=stderr, returncode=result.returncode)
            raise CalendarToolError(
                f"Calendar tool exited with status {result.returncode}",
                stderr=stderr or (result.stdout or ""),
                returncode=result.returncode,
            )

        if stderr.strip():
            logger.warning("Calendar tool stderr: %s", stderr.strip())
        return result.stdout or ""

    def _build_batch(self, date_range: DateRange, output: ToolOutput) -> ExportBatch:
        events = []
        warnings = []

        for record in output.records:
            try:
                events.append(NormalizedEvent.from_dict(record, self.tzinfo))
            except ValueError as e:
                warnings.append(SkippedEventWarning(str(record.get("title") or "Unknown"), str(e)))

        if isinstance(output, DelimitedToolOutput):
            for line in output.malformed_lines:
                warnings.append(SkippedEventWarning(line, "expected calendar||title||start||end"))
        elif output.date_range:
            logger.debug(
                "Tool reported range %s - %s (requested %s - %s)",
                output.date_range.get("start"),
                output.date_range.get("end"),
                date_range.start.isoformat(),
                date_range.end.isoformat(),
            )

        for warning in warnings:
            logger.warning(str(warning))

        batch = ExportBatch(date_range=date_range, events=events, warnings=warnings)
        logger.info("Read %d event(s), skipped %d", batch.count, len(warnings))
        return batch
