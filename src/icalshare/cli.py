"""Command-line interface for ical-share."""

import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import typer
from dateutil import parser as dateutil_parser

from icalshare.config.settings import load_config
from icalshare.core.event_model import DateRange
from icalshare.core.ics_builder import summarize_ics
from icalshare.core.pipeline import ExportResult, publish_file, reader_from_config, run_pipeline
from icalshare.exceptions.errors import ICalShareError
from icalshare.storage.key_manager import get_upload_token_source, save_upload_token
from icalshare.utils.error_messages import get_user_friendly_error
from icalshare.utils.masking import mask_key
from icalshare.utils.paths import resolve_tool_path

app = typer.Typer(
    name="ical-share",
    help="Export this week's calendar to an .ics file and publish it at a stable URL",
)

logger = logging.getLogger(__name__)

START_OPTION = typer.Option(None, "--start", "-s", help="Range start (default: this Monday 00:00)")
END_OPTION = typer.Option(None, "--end", "-e", help="Exclusive range end (default: start + 7 days)")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Where to write the .ics file")
TOOL_OPTION = typer.Option(None, "--tool", "-t", help="Path to the calendar access tool")
TIMEZONE_OPTION = typer.Option(None, "--timezone", help="Timezone of the calendar (default: local)")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def fail(error: Exception) -> None:
    """Report a fatal error on stderr and exit with status 1."""
    logger.debug("Fatal error", exc_info=error)
    typer.echo(f"❌ {get_user_friendly_error(error)}", err=True)
    raise typer.Exit(1)


def _parse_cli_datetime(value: str, name: str) -> datetime:
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError):
        raise typer.BadParameter(f"Could not understand date '{value}'", param_hint=name)


def resolve_range(start: Optional[str], end: Optional[str], tzinfo) -> Optional[DateRange]:
    """Turn the --start/--end flags into a DateRange, or None for the current week."""
    if start is None and end is None:
        return None
    if start is None:
        raise typer.BadParameter("--end requires --start", param_hint="--end")

    start_dt = _parse_cli_datetime(start, "--start")
    end_dt = _parse_cli_datetime(end, "--end") if end else start_dt + timedelta(days=7)
    return DateRange.from_naive(start_dt, end_dt, tzinfo)


def report_export(result: ExportResult) -> None:
    batch = result.batch
    typer.echo(f"✅ Calendar exported to {result.output_path}")
    typer.echo(f"📊 Total events exported: {batch.count}")
    if batch.warnings:
        typer.echo(f"⚠️ Skipped {len(batch.warnings)} event(s):", err=True)
        for warning in batch.warnings:
            typer.echo(f"   - {warning}", err=True)
    if result.published:
        typer.echo(f"📎 File URL: {result.published.url}")


def _run(
    start: Optional[str],
    end: Optional[str],
    output: Optional[Path],
    tool: Optional[str],
    timezone: Optional[str],
    upload: bool,
) -> None:
    try:
        config = load_config(
            require_publish=upload,
            output_path=output,
            tool_path=tool,
            timezone=timezone,
        )
        reader = reader_from_config(config)
        if reader.timezone_warning:
            typer.echo(f"⚠️ {reader.timezone_warning}", err=True)
        date_range = resolve_range(start, end, reader.tzinfo)
        result = run_pipeline(config, date_range=date_range, reader=reader, upload=upload)
    except ICalShareError as e:
        fail(e)
    else:
        report_export(result)


@app.callback(invoke_without_command=True)
def default(ctx: typer.Context) -> None:
    """Run the full export and publish when no command is given."""
    if ctx.invoked_subcommand is None:
        setup_logging(False)
        _run(None, None, None, None, None, upload=True)


@app.command()
def run(
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    tool: Optional[str] = TOOL_OPTION,
    timezone: Optional[str] = TIMEZONE_OPTION,
    no_upload: bool = typer.Option(False, "--no-upload", help="Write the file but don't publish it"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Export the calendar and publish it."""
    setup_logging(verbose)
    _run(start, end, output, tool, timezone, upload=not no_upload)


@app.command()
def export(
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    tool: Optional[str] = TOOL_OPTION,
    timezone: Optional[str] = TIMEZONE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Export the calendar to an .ics file without publishing it."""
    setup_logging(verbose)
    _run(start, end, output, tool, timezone, upload=False)


@app.command()
def publish(
    path: Optional[Path] = typer.Argument(None, help="File to publish (default: configured output)"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Publish an existing .ics file under the configured identifier."""
    setup_logging(verbose)
    try:
        config = load_config(require_publish=True)
        result = publish_file(config, path or config.output_path)
    except ICalShareError as e:
        fail(e)
    else:
        typer.echo(f"📎 File URL: {result.url}")


@app.command("check-tool")
def check_tool(
    tool: Optional[str] = TOOL_OPTION,
    timezone: Optional[str] = TIMEZONE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run the calendar tool once for today to verify it works."""
    setup_logging(verbose)
    try:
        config = load_config(tool_path=tool, timezone=timezone)
    except ICalShareError as e:
        fail(e)

    reader = reader_from_config(config)
    result = reader.check_tool()
    if not result.ok:
        typer.echo(f"❌ {result.message}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ {result.message}")


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="ICS file to read back"),
) -> None:
    """List the events of a generated .ics file."""
    try:
        summary = summarize_ics(path.read_bytes())
    except (OSError, ValueError) as e:
        typer.echo(f"❌ Could not read {path}: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{path}: {summary.event_count} event(s)")
    for uid, (start, end) in zip(summary.uids, summary.spans):
        typer.echo(f"  {uid}  {start} -> {end}")


@app.command()
def config(
    validate: bool = typer.Option(False, "--validate", help="Validate publishing configuration"),
    show: bool = typer.Option(False, "--show", help="Show current config (masks secrets)"),
) -> None:
    """Check or display configuration."""
    try:
        settings = load_config(require_publish=validate)
    except ICalShareError as e:
        fail(e)

    if validate:
        typer.echo("✅ Configuration is valid")

    if show:
        _, token_source = get_upload_token_source()
        typer.echo("\nCurrent Configuration:")
        typer.echo(f"  Output File: {settings.output_path}")
        typer.echo(f"  Calendar Tool: {resolve_tool_path(settings.tool_path)}")
        typer.echo(f"  Timezone: {settings.timezone}")
        typer.echo(f"  Backend: {settings.backend}")
        typer.echo(f"  Publish Key: {settings.perma_key or '(not set)'}")
        typer.echo(f"  UploadThing App: {settings.uploadthing_app_id or '(not set)'}")
        typer.echo(f"  Upload Token: {mask_key(settings.uploadthing_token)} ({token_source})")
        typer.echo(f"  S3 Bucket: {settings.s3_bucket or '(not set)'}")


@app.command("set-token")
def set_token(
    token: str = typer.Option(..., prompt=True, hide_input=True, help="UploadThing token"),
) -> None:
    """Store the UploadThing token in the OS keyring."""
    ok, where = save_upload_token(token)
    if not ok:
        typer.echo(f"❌ {where}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ Token {mask_key(token.strip())} saved to {where}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
