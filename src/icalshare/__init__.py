"""
ical-share - Weekly Calendar Export and Publisher

Exports the current week's events from the local calendar store into an
iCalendar file and publishes it under a stable URL.
"""

__version__ = "1.0.0"

# Public API - import commonly used components
from icalshare.config import ExportConfig, load_config
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
from icalshare.core.calendar_reader import CalendarReader
from icalshare.core.event_model import DateRange, ExportBatch, NormalizedEvent
from icalshare.core.ics_builder import render_ics, write_ics
from icalshare.core.pipeline import run_pipeline
from icalshare.publish import PublishResult, UploadThingPublisher, create_publisher

__all__ = [
    # Version
    "__version__",
    # Config
    "ExportConfig",
    "load_config",
    # Exceptions
    "ICalShareError",
    "ConfigurationError",
    "InvalidRangeError",
    "CalendarToolError",
    "ToolNotFoundError",
    "AccessDeniedError",
    "ParseError",
    "UploadError",
    "SkippedEventWarning",
    # Core
    "CalendarReader",
    "DateRange",
    "ExportBatch",
    "NormalizedEvent",
    "render_ics",
    "write_ics",
    "run_pipeline",
    # Publishing
    "PublishResult",
    "UploadThingPublisher",
    "create_publisher",
]
