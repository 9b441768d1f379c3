"""Main CLI application using Click framework."""

import asyncio
import functools
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..config import (
    DEFAULT_CONFIG_PATH,
    AppSettings,
    ConfigError,
    ConfigLoader,
    MonitorConfiguration,
    create_example_config,
    get_settings,
    update_settings,
    validate_urls,
)
from ..pipeline import ReconcileAction, RunReport, VersionMonitor
from ..scheduler import SchedulerError, SchedulerManager, SchedulerStats
from ..scraper import FetchResult, HttpFetcher
from ..storage import StorageError, StoredRecord, create_version_store
from ..utils.logging import get_structured_logger, setup_logging
from .types import CLIContext, CommandResult

console = Console()
logger = get_structured_logger(__name__)

PAUSE_PROMPT = "<Press Enter To Continue>"


def async_command(f):
    """Decorator to run async functions in Click commands."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("❌ Operation cancelled by user", style="red")
            sys.exit(1)
        except ConfigError as e:
            console.print(f"❌ Configuration error: {str(e)}", style="red")
            sys.exit(1)
        except (StorageError, SchedulerError) as e:
            console.print(f"❌ Error: {str(e)}", style="red")
            logger.error("CLI command failed", error=str(e))
            sys.exit(1)

    return wrapper


def handle_result(result: CommandResult, ctx: CLIContext) -> None:
    """Handle command result output."""
    if result.success:
        if result.message:
            console.print(f"✅ {result.message}", style="green")
        if result.data and ctx.verbose:
            console.print_json(data=result.data)
    else:
        console.print(f"❌ {result.message}", style="red")

    if not result.success:
        sys.exit(result.exit_code)


def load_runtime(
    ctx: CLIContext, single_url: Optional[str] = None
) -> tuple[AppSettings, MonitorConfiguration]:
    """Resolve settings and targets for a command and configure logging.

    The config file is always read; ``single_url`` only replaces its URL list.
    """
    overrides = {}
    if ctx.debug:
        overrides["debug"] = True
    if ctx.verbose:
        overrides["verbose"] = True

    settings = get_settings()
    if overrides:
        settings = update_settings(settings, **overrides)

    setup_logging(settings.effective_log_level, settings.json_logs)

    monitor_config = ConfigLoader(ctx.config_path).get_monitor_config()
    if single_url:
        monitor_config = MonitorConfiguration(
            urls=validate_urls([single_url.strip()]),
            parse_headers=monitor_config.parse_headers,
        )

    return settings, monitor_config


async def pause_after_result(result: FetchResult) -> None:
    """Block until the operator acknowledges a fingerprinted URL."""
    if not result.success:
        return
    console.print(
        f"[cyan]{result.host}[/cyan] version {result.version_fingerprint}"
    )
    await asyncio.to_thread(click.pause, PAUSE_PROMPT)


def print_report(report: RunReport, verbose: bool) -> None:
    """Print per-host status blocks and detected changes for a run."""
    for result in report.results:
        if result.success and not verbose:
            continue
        console.print(f"host request status [bold]{result.host}[/bold]")
        console.print(f"- success:       {result.success}")
        console.print(f"- url:           {result.url}")
        console.print(f"- error message: {result.error_message}")
        if verbose and result.success:
            console.print(f"- includes hash: {result.includes_fingerprint}")
            console.print(f"- header hash:   {result.header_fingerprint}")
            console.print(f"- version hash:  {result.version_fingerprint}")

    if not report.persisted:
        console.print("- skipping store update in debug mode", style="yellow")

    for outcome in report.outcomes:
        if outcome.changed:
            console.print(f"- update found for {outcome.host}", style="green")
            console.print(f"  - last version:  {outcome.previous_fingerprint}")
            console.print(f"  - update count:  {outcome.update_count}")
        elif outcome.error and outcome.action is not ReconcileAction.FETCH_FAILED:
            console.print(
                f"- store error for {outcome.host}: {outcome.error}", style="red"
            )

    console.print("Update Complete", style="bold")


def format_timestamp(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M:%S"
    )


def schedule_status(stats: SchedulerStats) -> str:
    next_run = (
        stats.next_run_at.strftime("%Y-%m-%d %H:%M:%S")
        if stats.next_run_at
        else "not scheduled"
    )
    return (
        f"next run at {next_run} "
        f"(previous runs: {stats.runs_executed}, failed: {stats.runs_failed})"
    )


def record_table(title: str, records: list[StoredRecord]) -> Table:
    table = Table(title=title)
    table.add_column("Updated", style="yellow")
    table.add_column("Count", justify="right", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Header", style="blue")
    table.add_column("Includes", style="blue")

    for record in records:
        table.add_row(
            format_timestamp(record.updated_at),
            str(record.update_count),
            record.version_fingerprint,
            record.header_fingerprint,
            record.includes_fingerprint,
        )
    return table


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--debug", "-d", is_flag=True, help="Sequential run, pause per url, no writes"
)
@click.pass_context
def cli(ctx, config: Path, verbose: bool, debug: bool) -> None:
    """Deploy Velocity - track how often websites ship new front-end builds."""
    ctx.obj = CLIContext(config_path=config, verbose=verbose, debug=debug)


@cli.command()
@click.option("--url", "-u", help="Process a single url instead of the config list")
@click.pass_obj
@async_command
async def run(ctx: CLIContext, url: Optional[str]) -> None:
    """Fetch every target once and record version changes."""
    settings, monitor_config = load_runtime(ctx, url)

    store = await create_version_store(settings.database)
    try:
        async with HttpFetcher(settings.monitor) as fetcher:
            monitor = VersionMonitor(
                settings,
                fetcher,
                store,
                parse_headers=monitor_config.parse_headers,
                on_result=pause_after_result if settings.debug else None,
            )
            report = await monitor.run(monitor_config.urls)
    finally:
        await store.cleanup()

    print_report(report, settings.verbose)


@cli.command()
@click.option(
    "--interval", type=int, default=None, help="Seconds between runs (default: settings)"
)
@click.pass_obj
@async_command
async def watch(ctx: CLIContext, interval: Optional[int]) -> None:
    """Run continuously on a fixed interval until interrupted."""
    settings, monitor_config = load_runtime(ctx)
    interval = interval or settings.monitor.interval_seconds

    store = await create_version_store(settings.database)
    try:
        async with HttpFetcher(settings.monitor) as fetcher:
            monitor = VersionMonitor(
                settings, fetcher, store, parse_headers=monitor_config.parse_headers
            )

            async def scheduled_run() -> None:
                report = await monitor.run(monitor_config.urls)
                print_report(report, settings.verbose)
                console.print(schedule_status(scheduler.get_stats()), style="dim")

            scheduler = SchedulerManager(scheduled_run, interval)
            async with scheduler:
                console.print(
                    f"👀 Watching {len(monitor_config.urls)} urls every {interval}s",
                    style="bold blue",
                )
                await asyncio.Event().wait()
    finally:
        await store.cleanup()


@cli.command()
@click.argument("host")
@click.pass_obj
@async_command
async def show(ctx: CLIContext, host: str) -> None:
    """Show the latest stored version for a host."""
    settings, _ = load_runtime(ctx)

    store = await create_version_store(settings.database)
    try:
        records = await store.history(host, limit=1)
    finally:
        await store.cleanup()

    if not records:
        handle_result(
            CommandResult(
                success=False, message=f"No record for host: {host}", exit_code=1
            ),
            ctx,
        )
        return

    record = records[0]
    table = Table(title=f"Latest Version: {host}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("URL", record.url)
    table.add_row("Updated", format_timestamp(record.updated_at))
    table.add_row("Update Count", str(record.update_count))
    table.add_row("Version Hash", record.version_fingerprint)
    table.add_row("Header Hash", record.header_fingerprint)
    table.add_row("Includes Hash", record.includes_fingerprint)
    console.print(table)

    if ctx.verbose:
        console.print("Includes:", style="bold")
        console.print(record.includes_list or "-")


@cli.command()
@click.argument("host")
@click.option("--limit", default=10, show_default=True, help="Records to show")
@click.pass_obj
@async_command
async def history(ctx: CLIContext, host: str, limit: int) -> None:
    """Show recent version changes for a host."""
    settings, _ = load_runtime(ctx)

    store = await create_version_store(settings.database)
    try:
        records = await store.history(host, limit=limit)
    finally:
        await store.cleanup()

    if not records:
        handle_result(
            CommandResult(
                success=False, message=f"No record for host: {host}", exit_code=1
            ),
            ctx,
        )
        return

    console.print(record_table(f"Version History: {host}", records))


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_obj
def init(ctx: CLIContext, force: bool) -> None:
    """Write an example configuration file."""
    config_path = Path(ctx.config_path)
    if config_path.exists() and not force:
        handle_result(
            CommandResult(
                success=False,
                message=f"Config file already exists: {config_path} (use --force)",
                exit_code=1,
            ),
            ctx,
        )
        return

    try:
        create_example_config(config_path)
    except ConfigError as e:
        handle_result(
            CommandResult(success=False, message=str(e), exit_code=1), ctx
        )
        return

    handle_result(
        CommandResult(success=True, message=f"Wrote example config to {config_path}"),
        ctx,
    )


@cli.command()
@click.pass_obj
def validate(ctx: CLIContext) -> None:
    """Check the configuration file for problems."""
    issues = ConfigLoader(ctx.config_path).validate_config()

    if issues:
        for issue in issues:
            console.print(f"- {issue}", style="red")
        handle_result(
            CommandResult(
                success=False,
                message=f"Configuration has {len(issues)} issue(s)",
                exit_code=1,
            ),
            ctx,
        )
        return

    handle_result(CommandResult(success=True, message="Configuration is valid"), ctx)


if __name__ == "__main__":
    cli()
