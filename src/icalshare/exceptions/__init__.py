"""Custom exceptions for ical-share."""

from icalshare.exceptions.errors import (
    ICalShareError,
    ConfigurationError,
    InvalidRangeError,
    CalendarToolError,
    ToolNotFoundError,
    AccessDeniedError,
    ParseError,
    UploadError,
    SkippedEventWarning,
)

__all__ = [
    "ICalShareError",
    "ConfigurationError",
    "InvalidRangeError",
    "CalendarToolError",
    "ToolNotFoundError",
    "AccessDeniedError",
    "ParseError",
    "UploadError",
    "SkippedEventWarning",
]
