"""Exception hierarchy for ical-share."""

from typing import Optional


class ICalShareError(Exception):
    """Base class for all fatal ical-share errors."""


class ConfigurationError(ICalShareError):
    """Raised when a required configuration value is missing or invalid."""

    def __init__(self, item: str, hint: Optional[str] = None):
        self.item = item
        self.hint = hint
        message = f"Missing required configuration: {item}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


class InvalidRangeError(ICalShareError):
    """Raised when a date range does not satisfy start < end."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: start {start} is not before end {end}")


class CalendarToolError(ICalShareError):
    """Raised when the calendar-access tool fails to run or exits non-zero."""

    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None):
        self.stderr = stderr
        self.returncode = returncode
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class ToolNotFoundError(CalendarToolError):
    """Raised when the calendar-access tool is missing on disk."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Calendar access tool not found at {path}. "
            "Build it first or pass --tool with its location"
        )


class AccessDeniedError(CalendarToolError):
    """Raised when the OS refuses calendar access."""

    def __init__(self, stderr: str = "", returncode: Optional[int] = None):
        super().__init__(
            "Calendar access denied. Grant access in System Settings > "
            "Privacy & Security > Calendars and run again",
            stderr=stderr,
            returncode=returncode,
        )


class ParseError(ICalShareError):
    """Raised when the calendar tool output cannot be understood."""

    def __init__(self, reason: str, raw_output: str = ""):
        self.reason = reason
        self.raw_output = raw_output
        message = f"Could not parse calendar tool output: {reason}"
        if raw_output:
            message = f"{message}\n--- raw output ---\n{raw_output}"
        super().__init__(message)


class UploadError(ICalShareError):
    """Raised when publishing the calendar file fails."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.detail = detail
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SkippedEventWarning(UserWarning):
    """A calendar record that was dropped from the export (non-fatal)."""

    def __init__(self, title: str, reason: str):
        self.title = title
        self.reason = reason
        super().__init__(f"Skipping event '{title}': {reason}")
