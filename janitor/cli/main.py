"""Main CLI entry point using Typer."""

import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import NS, JanitorConfig
from ..context import JanitorContext
from ..errors import JanitorError
from ..models.event import EventType
from ..models.resource import CleanupState, ResourceType
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="janitor",
    help="Janitor - mark, notify and clean up unused AWS resources",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[JanitorConfig] = None
aws_profile: Optional[str] = None


@app.callback()
def main(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: $JANITOR_CONFIG or ~/.janitor/config.yaml)",
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Janitor - mark, notify and clean up unused AWS resources."""
    global config, aws_profile

    try:
        config = JanitorConfig.load(config_path)
    except JanitorError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    aws_profile = profile

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.get_str_or_else(NS + "logLevel", "INFO"))
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


def _context() -> JanitorContext:
    return JanitorContext(config, aws_profile=aws_profile)


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"janitor version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


@app.command()
def run(
    metrics_port: Optional[int] = typer.Option(
        None,
        "--metrics-port",
        help=(
            "Serve Prometheus metrics on this port while the cycle runs. The endpoint goes away when "
            "the command exits, so only a scrape during the cycle sees it"
        ),
    ),
):
    """Run one janitor cycle: mark, notify, clean, and send the summary.

    Intended to be triggered by a scheduler (cron, EventBridge, ...). The
    janitor starts leashed: nothing is deleted and no owner is notified until
    janitor.leashed is set to false.
    """
    from ..monitoring.exporter import register_counters, serve_metrics

    try:
        context = _context()
        janitor = context.build_janitor()
        if metrics_port:
            register_counters(janitor.counters)
            serve_metrics(metrics_port)
            console.print(f"Serving metrics on port {metrics_port}", style="dim")

        config.reload()
        janitor.run_cycle()

        if not janitor.runs:
            console.print(f"Janitor is disabled, set {NS}enabled=true to run it", style="yellow")
            raise typer.Exit(code=0)

        sections = context.reporter.collect(janitor.units)
        console.print(context.reporter.format_terminal(sections))

        if janitor.errors:
            console.print(f"✗ {janitor.errors} cleanup unit call(s) failed, see logs", style="bold red")
            raise typer.Exit(code=3)

        console.print("✓ Janitor cycle completed", style="green")

    except typer.Exit:
        raise
    except JanitorError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error running janitor cycle: {e}", style="bold red")
        logger.exception("Error in run command")
        raise typer.Exit(code=2)


def _set_opt_state(resource_id: str, region: Optional[str], opt_in: bool) -> None:
    direction = "in" if opt_in else "out"
    try:
        janitor = _context().build_janitor()
        event = janitor.set_resource_opt_state(resource_id, region, opt_in=opt_in)
    except JanitorError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    if event is None:
        console.print(
            f"✗ Resource '{resource_id}' is not tracked in region {region or janitor.region}", style="bold red"
        )
        raise typer.Exit(code=1)

    console.print(f"✓ Opted [bold]{resource_id}[/bold] {direction} (event {event.event_id})", style="green")


@app.command("opt-in")
def opt_in(
    resource_id: str = typer.Argument(..., help="Resource ID to make eligible for cleanup again"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Resource region (default: janitor region)"),
):
    """Opt a tracked resource back in to janitor cleanup."""
    _set_opt_state(resource_id, region, opt_in=True)


@app.command("opt-out")
def opt_out(
    resource_id: str = typer.Argument(..., help="Resource ID to exclude from cleanup"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Resource region (default: janitor region)"),
):
    """Opt a tracked resource out of janitor cleanup."""
    _set_opt_state(resource_id, region, opt_in=False)


@app.command()
def status(
    state: Optional[str] = typer.Option(
        None, "--state", "-s", help="Filter by state: marked, unmarked, janitor_terminated, user_terminated"
    ),
    resource_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by resource type, e.g. EBS_VOLUME"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Filter by region"),
):
    """List resources tracked by the janitor."""
    try:
        state_filter = CleanupState(state.upper()) if state else None
        type_filter = ResourceType(resource_type.upper()) if resource_type else None
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    resources = _context().tracker.get_resources(resource_type=type_filter, state=state_filter, region=region)

    if not resources:
        console.print("No tracked resources found.")
        return

    table = Table(title=f"Tracked Resources ({len(resources)})")
    table.add_column("Resource ID", style="cyan")
    table.add_column("Type")
    table.add_column("Region")
    table.add_column("State")
    table.add_column("Opted Out")
    table.add_column("Termination", justify="right")
    table.add_column("Reason")

    for resource in resources:
        table.add_row(
            resource.id,
            resource.resource_type.value,
            resource.region,
            resource.state.value if resource.state else "-",
            "[yellow]yes[/yellow]" if resource.opt_out_of_janitor else "no",
            resource.expected_termination_time.strftime("%Y-%m-%d") if resource.expected_termination_time else "-",
            resource.termination_reason or "",
        )

    console.print(table)


@app.command()
def events(
    days: int = typer.Option(7, "--days", "-d", help="Show events from the last N days"),
    event_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by event type, e.g. OPT_OUT_RESOURCE"),
    resource_id: Optional[str] = typer.Option(None, "--resource", help="Filter by resource ID"),
):
    """Show the janitor audit log."""
    try:
        type_filter = EventType(event_type.upper()) if event_type else None
    except ValueError:
        console.print(f"✗ Invalid event type: {event_type}", style="bold red")
        raise typer.Exit(code=1)

    since = datetime.now(timezone.utc) - timedelta(days=days)
    found = _context().recorder.find_events(since=since, event_type=type_filter, resource_id=resource_id)

    if not found:
        console.print(f"No events in the last {days} days.")
        return

    table = Table(title=f"Janitor Events ({len(found)})")
    table.add_column("Time")
    table.add_column("Type", style="bold")
    table.add_column("Resource ID", style="cyan")
    table.add_column("Region")
    table.add_column("Event ID")

    for event in found:
        table.add_row(
            event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            event.event_type.value,
            event.resource_id,
            event.region,
            event.event_id,
        )

    console.print(table)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
