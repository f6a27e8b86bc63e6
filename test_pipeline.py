import json
from datetime import datetime
from pathlib import Path

import pytest
import pytz
from typer.testing import CliRunner

from icalshare import cli
from icalshare.config.settings import ExportConfig
from icalshare.core.calendar_reader import CalendarReader
from icalshare.core.event_model import DateRange
from icalshare.core.ics_builder import summarize_ics
from icalshare.core.pipeline import export_calendar, run_pipeline
from icalshare.exceptions import AccessDeniedError

WEEK = DateRange.from_naive(datetime(2024, 7, 8), datetime(2024, 7, 15), pytz.utc)

THREE_EVENTS = json.dumps({
    "dateRange": {"start": "2024-07-08T00:00:00", "end": "2024-07-15T00:00:00"},
    "events": [
        {"calendar": "Work", "title": "Team Sync", "startDate": "2024-07-08T09:00:00",
         "endDate": "2024-07-08T09:30:00", "isAllDay": False},
        {"calendar": "Work", "title": "Broken Event", "startDate": "??",
         "endDate": "2024-07-08T11:00:00", "isAllDay": False},
        {"calendar": "Home", "title": "Day Off", "startDate": "2024-07-12T00:00:00",
         "endDate": "2024-07-12T23:59:59", "isAllDay": True},
    ],
    "totalCount": 3,
})

runner = CliRunner()


@pytest.fixture
def publish_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    output = tmp_path / "shared.ics"
    monkeypatch.setenv("CALENDAR_PERMA_KEY", "perma-key")
    monkeypatch.setenv("UPLOADTHING_TOKEN", "sk_test_123456789")
    monkeypatch.setenv("UPLOADTHING_APP_ID", "app123")
    monkeypatch.setenv("ICAL_SHARE_OUTPUT", str(output))
    monkeypatch.setenv("ICAL_SHARE_TIMEZONE", "UTC")
    return output


def _use_reader(monkeypatch: pytest.MonkeyPatch, tool_file: Path, run) -> None:
    monkeypatch.setattr(
        cli,
        "reader_from_config",
        lambda config: CalendarReader(tool_path=tool_file, timezone=config.timezone, runner=run),
    )


def test_run_pipeline_writes_and_publishes(
    tmp_path: Path, tool_file: Path, make_runner, memory_publisher
) -> None:
    config = ExportConfig(output_path=tmp_path / "shared.ics", perma_key="perma-key", timezone="UTC")
    reader = CalendarReader(tool_path=tool_file, timezone="UTC", runner=make_runner(THREE_EVENTS))

    result = run_pipeline(config, date_range=WEEK, reader=reader, publisher=memory_publisher)

    assert result.batch.count == 2
    assert result.output_path.exists()
    assert result.published.url == "https://files.example.test/perma-key"
    assert memory_publisher.objects["perma-key"] == result.output_path.read_bytes()


def test_empty_week_still_publishes(
    tmp_path: Path, tool_file: Path, make_runner, memory_publisher
) -> None:
    config = ExportConfig(output_path=tmp_path / "shared.ics", perma_key="perma-key", timezone="UTC")
    empty = json.dumps({"dateRange": {}, "events": [], "totalCount": 0})
    reader = CalendarReader(tool_path=tool_file, timezone="UTC", runner=make_runner(empty))

    result = run_pipeline(config, date_range=WEEK, reader=reader, publisher=memory_publisher)

    assert result.batch.count == 0
    assert summarize_ics(result.output_path.read_bytes()).event_count == 0
    assert memory_publisher.calls == 1


def test_failed_read_leaves_output_untouched(
    tmp_path: Path, tool_file: Path, make_runner, memory_publisher
) -> None:
    output = tmp_path / "shared.ics"
    output.write_text("previous export")
    config = ExportConfig(output_path=output, perma_key="perma-key", timezone="UTC")
    reader = CalendarReader(
        tool_path=tool_file, timezone="UTC", runner=make_runner(stderr="permission denied", returncode=1)
    )

    with pytest.raises(AccessDeniedError):
        run_pipeline(config, date_range=WEEK, reader=reader, publisher=memory_publisher)

    assert output.read_text() == "previous export"
    assert memory_publisher.calls == 0


def test_export_defaults_to_current_week(tmp_path: Path, tool_file: Path, make_runner) -> None:
    calls = []
    config = ExportConfig(output_path=tmp_path / "shared.ics", timezone="UTC")
    reader = CalendarReader(
        tool_path=tool_file,
        timezone="UTC",
        runner=make_runner(json.dumps({"events": []}), calls=calls),
    )

    result = export_calendar(config, reader=reader, now=datetime(2024, 7, 11, 8, 0, tzinfo=pytz.utc))

    assert result.batch.date_range == WEEK
    assert calls[0]["command"][1:] == ["07/08/2024 00:00:00", "07/15/2024 00:00:00"]


def test_cli_run_publishes(
    monkeypatch: pytest.MonkeyPatch, publish_env: Path, tool_file: Path, make_runner, memory_publisher
) -> None:
    _use_reader(monkeypatch, tool_file, make_runner(THREE_EVENTS))
    monkeypatch.setattr("icalshare.core.pipeline.create_publisher", lambda config: memory_publisher)

    result = runner.invoke(cli.app, ["run", "--start", "2024-07-08"])

    assert result.exit_code == 0, result.output
    assert "Total events exported: 2" in result.output
    assert "Broken Event" in result.output
    assert "File URL: https://files.example.test/perma-key" in result.output
    assert publish_env.exists()


def test_cli_access_denied_exits_1_without_writing(
    monkeypatch: pytest.MonkeyPatch, publish_env: Path, tool_file: Path, make_runner
) -> None:
    _use_reader(monkeypatch, tool_file, make_runner(stderr="permission denied", returncode=1))

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
    assert "System Settings" in result.output
    assert "Calendars" in result.output
    assert not publish_env.exists()


def test_cli_missing_configuration_is_fatal(
    monkeypatch: pytest.MonkeyPatch, publish_env: Path, tool_file: Path, make_runner
) -> None:
    monkeypatch.delenv("CALENDAR_PERMA_KEY")
    calls = []
    _use_reader(monkeypatch, tool_file, make_runner(THREE_EVENTS, calls=calls))

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
    assert "CALENDAR_PERMA_KEY" in result.output
    assert calls == []


def test_cli_export_does_not_need_publish_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, tool_file: Path, make_runner
) -> None:
    output = tmp_path / "week.ics"
    _use_reader(monkeypatch, tool_file, make_runner(THREE_EVENTS))

    result = runner.invoke(
        cli.app, ["export", "--start", "2024-07-08", "--output", str(output), "--timezone", "UTC"]
    )

    assert result.exit_code == 0, result.output
    text = output.read_text()
    assert "DTSTART:20240708T090000Z" in text
    assert "DTSTART;VALUE=DATE:20240712" in text


def test_cli_rejects_inverted_range(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, tool_file: Path, make_runner
) -> None:
    _use_reader(monkeypatch, tool_file, make_runner(THREE_EVENTS))

    result = runner.invoke(
        cli.app,
        ["export", "--start", "2024-07-15", "--end", "2024-07-08", "--output", str(tmp_path / "x.ics")],
    )

    assert result.exit_code == 1
    assert "Invalid date range" in result.output


def test_cli_check_tool(monkeypatch: pytest.MonkeyPatch, tool_file: Path, make_runner) -> None:
    _use_reader(monkeypatch, tool_file, make_runner(json.dumps({"events": []})))

    result = runner.invoke(cli.app, ["check-tool", "--timezone", "UTC"])

    assert result.exit_code == 0, result.output
    assert "returned 0 event(s)" in result.output


def test_cli_inspect(tmp_path: Path, tool_file: Path, make_runner) -> None:
    config = ExportConfig(output_path=tmp_path / "shared.ics", timezone="UTC")
    reader = CalendarReader(tool_path=tool_file, timezone="UTC", runner=make_runner(THREE_EVENTS))
    export_calendar(config, date_range=WEEK, reader=reader)

    result = runner.invoke(cli.app, ["inspect", str(config.output_path)])

    assert result.exit_code == 0, result.output
    assert "2 event(s)" in result.output
    assert "-0@ical-share" in result.output


def test_cli_inspect_event_with_duration(tmp_path: Path) -> None:
    path = tmp_path / "other.ics"
    path.write_bytes(
        b"BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//Other//Client//EN\r\n"
        b"BEGIN:VEVENT\r\nUID:standup@example.com\r\nDTSTAMP:20240701T000000Z\r\n"
        b"DTSTART:20240708T090000Z\r\nDURATION:PT30M\r\nSUMMARY:Standup\r\n"
        b"END:VEVENT\r\nEND:VCALENDAR\r\n"
    )

    result = runner.invoke(cli.app, ["inspect", str(path)])

    assert result.exit_code == 0, result.output
    assert "1 event(s)" in result.output
    assert "standup@example.com  2024-07-08 09:00:00+00:00 -> 2024-07-08 09:30:00+00:00" in result.output


def test_cli_warns_about_unknown_timezone(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, tool_file: Path, make_runner
) -> None:
    output = tmp_path / "week.ics"
    _use_reader(monkeypatch, tool_file, make_runner(THREE_EVENTS))

    result = runner.invoke(
        cli.app,
        ["export", "--start", "2024-07-08", "--output", str(output), "--timezone", "Nowhere/Atlantis"],
    )

    assert result.exit_code == 0, result.output
    assert "Couldn't resolve timezone 'Nowhere/Atlantis'" in result.output
