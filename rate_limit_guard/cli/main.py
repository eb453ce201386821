"""
CLI interface for Rate Limit Guard.

Provides the host runtime hook and commands to inspect the log.
"""

import json
import logging
import sys
from enum import Enum
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rate_limit_guard.config.loader import default_detector_config, load_detector_config
from rate_limit_guard.core.detector import detect_families, matched_terms
from rate_limit_guard.core.monitor import read_payload, run_hook
from rate_limit_guard.core.patterns import WarningKind
from rate_limit_guard.storage.log_file import TIMESTAMP_FORMAT
from rate_limit_guard.storage.repository import LogRepository

app = typer.Typer()
console = Console()

# Exit codes for operator commands; the hook always exits 0
EXIT_CODE_PASS = 0
EXIT_CODE_MATCH = 1  # check found at least one family
EXIT_CODE_FAIL = 2

HOOK_EVENTS = ("Notification", "Stop")


class KindFilter(str, Enum):
    """Record kinds accepted by --kind."""
    rate_limit = WarningKind.RATE_LIMIT.value
    usage = WarningKind.USAGE.value


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Write debug logging to stderr"
    )
):
    """Rate Limit Guard CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
    if ctx.invoked_subcommand is None:
        console.print("Rate Limit Guard - Use --help to see available commands")


@app.command()
def hook():
    """
    Run as a host runtime hook.

    Reads the event payload from stdin, logs rate limit and usage
    warnings to ~/.claude/rate-limit.log and always exits 0.
    """
    payload = read_payload(sys.stdin)
    sys.exit(run_hook(payload))


@app.command()
def check(
    text: str = typer.Argument(..., help="Text to check for limit indicators"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with keyword families"
    )
):
    """Show which keyword families match TEXT without writing the log."""
    try:
        config = load_detector_config(config_path) if config_path else default_detector_config()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    matches = detect_families(text, config.families)
    if not matches:
        console.print("[green]✓[/] No limit indicators found")
        sys.exit(EXIT_CODE_PASS)

    for family in matches:
        terms = ", ".join(matched_terms(text, family))
        console.print(f"[bold yellow]{family.label}[/] ({family.name}): {terms}")
    sys.exit(EXIT_CODE_MATCH)


@app.command()
def history(
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Log file to read (defaults to ~/.claude/rate-limit.log)"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of records to show"
    ),
    kind: Optional[KindFilter] = typer.Option(
        None,
        "--kind",
        "-k",
        help="Only show one kind of warning"
    )
):
    """List the most recent warnings, newest first."""
    try:
        repository = LogRepository(log_file)
        label = WarningKind(kind.value).label if kind else None
        records = repository.get_recent_records(label=label, limit=limit)
    except OSError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if not records:
        console.print(f"\n[bold yellow]No warnings logged in {repository.log_path}[/]\n")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title=f"Rate limit log: {repository.log_path}")
    table.add_column("Time", no_wrap=True)
    table.add_column("Warning", no_wrap=True)
    table.add_column("Input")
    for record in records:
        style = "red" if record.label == WarningKind.RATE_LIMIT.label else "yellow"
        table.add_row(
            record.timestamp.strftime(TIMESTAMP_FORMAT),
            f"[{style}]{record.label}[/]",
            Text(_truncate(record.payload)),
        )
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def summary(
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Log file to read (defaults to ~/.claude/rate-limit.log)"
    )
):
    """Count logged warnings per kind."""
    try:
        repository = LogRepository(log_file)
        stats = repository.get_summary()
    except OSError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    console.print("\n[bold]Rate Limit Summary[/bold]")
    console.print("-" * 40)
    console.print(f"Log file: {repository.log_path}")
    console.print(f"Total warnings: {stats['total']:,}")
    for label, count in stats["by_label"].items():
        console.print(f"{label}: {count:,}")
    if stats["first"] is not None:
        console.print(f"First: {stats['first'].strftime(TIMESTAMP_FORMAT)}")
        console.print(f"Last: {stats['last'].strftime(TIMESTAMP_FORMAT)}")
    sys.exit(EXIT_CODE_PASS)


@app.command("hooks-config")
def hooks_config(
    command: str = typer.Option(
        "rate-limit-guard hook",
        "--command",
        help="Command the host runtime should run"
    )
):
    """Print hook registration JSON for the Notification and Stop events."""
    entry = [{"hooks": [{"type": "command", "command": command}]}]
    config = {"hooks": {event: entry for event in HOOK_EVENTS}}
    # Plain print keeps the JSON free of console markup
    print(json.dumps(config, indent=2))
    sys.exit(EXIT_CODE_PASS)


def _truncate(text: str, width: int = 80) -> str:
    """Collapse a payload to one line for table display."""
    flat = " ".join(text.split())
    if len(flat) <= width:
        return flat
    return flat[:width - 3] + "..."


if __name__ == "__main__":
    app()
