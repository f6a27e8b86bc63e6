"""Read -> format -> publish, one run at a time."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from icalshare.config.settings import ExportConfig
from icalshare.core.calendar_reader import CalendarReader
from icalshare.core.event_model import DateRange, ExportBatch
from icalshare.core.ics_builder import write_ics
from icalshare.publish import Publisher, PublishResult, create_publisher

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """What one run produced."""

    batch: ExportBatch
    output_path: Path
    published: Optional[PublishResult] = None


def reader_from_config(config: ExportConfig) -> CalendarReader:
    return CalendarReader(tool_path=config.tool_path, timezone=config.timezone)


def export_calendar(
    config: ExportConfig,
    date_range: Optional[DateRange] = None,
    reader: Optional[CalendarReader] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """Read the events and write the .ics file.

    The output file is only touched after the read succeeded.

    Args:
        config: Run configuration.
        date_range: Range to export (default: the current week).
        reader: Calendar reader (default: built from config).
        now: Reference time for the default range.

    Returns:
        ExportResult without publish information.
    """
    reader = reader or reader_from_config(config)
    if date_range is None:
        date_range = DateRange.current_week(reader.tzinfo, now=now)

    batch = reader.read(date_range)
    path = write_ics(batch, config.output_path)
    return ExportResult(batch=batch, output_path=path)


def publish_file(
    config: ExportConfig,
    path: Path,
    publisher: Optional[Publisher] = None,
) -> PublishResult:
    """Publish ``path`` under the configured stable identifier."""
    if publisher is None:
        config.validate_publish()
        publisher = create_publisher(config)
    return publisher.publish(path, config.perma_key)


def run_pipeline(
    config: ExportConfig,
    date_range: Optional[DateRange] = None,
    reader: Optional[CalendarReader] = None,
    publisher: Optional[Publisher] = None,
    upload: bool = True,
    now: Optional[datetime] = None,
) -> ExportResult:
    """Export the calendar and, unless ``upload`` is False, publish it.

    Any ICalShareError aborts the run and propagates to the caller.
    """
    result = export_calendar(config, date_range=date_range, reader=reader, now=now)
    if upload:
        result.published = publish_file(config, result.output_path, publisher)
    else:
        logger.info("Upload skipped")
    return result
