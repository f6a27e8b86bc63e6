"""Core export logic for ical-share."""

from icalshare.core.calendar_reader import CalendarReader, ToolCheckResult
from icalshare.core.event_model import DateRange, ExportBatch, NormalizedEvent
from icalshare.core.ics_builder import build_calendar, render_ics, summarize_ics, write_ics
from icalshare.core.pipeline import ExportResult, export_calendar, publish_file, run_pipeline

__all__ = [
    "CalendarReader",
    "ToolCheckResult",
    "DateRange",
    "ExportBatch",
    "NormalizedEvent",
    "build_calendar",
    "render_ics",
    "summarize_ics",
    "write_ics",
    "ExportResult",
    "export_calendar",
    "publish_file",
    "run_pipeline",
]
