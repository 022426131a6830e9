"""
Events command: read one aggregate history
"""

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from evstore.core import EventStoreError, canonical_json_str
from cli.fixture import load_adapter

console = Console()


def events_command(
    fixture_path: str = typer.Argument(..., help="Events file (JSON array, {\"events\": [...]} or JSONL)"),
    aggregate_id: str = typer.Argument(..., help="Aggregate to read"),
    min_version: Optional[int] = typer.Option(None, "--min-version", help="Inclusive lower version bound"),
    max_version: Optional[int] = typer.Option(None, "--max-version", help="Inclusive upper version bound"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Max events (after ordering)"),
    reverse: bool = typer.Option(False, "--reverse", "-r", help="Newest version first"),
    show_payload: bool = typer.Option(False, "--payload", "-p", help="Show full payload"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Read the event history of one aggregate.

    Examples:
        evstore events events.json order-1
        evstore events events.json order-1 --min-version 2 --max-version 5
        evstore events events.jsonl order-1 --reverse --limit 1 --json
    """
    try:
        adapter = load_adapter(fixture_path)
        result = asyncio.run(
            adapter.get_events(
                aggregate_id,
                min_version=min_version,
                max_version=max_version,
                limit=limit,
                reverse=reverse,
            )
        )
    except FileNotFoundError:
        if json_output:
            print(json.dumps({"error": "Fixture not found", "path": fixture_path}))
        else:
            console.print(f"[red]Error: Fixture not found:[/red] {fixture_path}")
        raise typer.Exit(2)
    except EventStoreError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    events = result.events

    if json_output:
        print(canonical_json_str({"events": events, "count": len(events)}, indent=2))
        return

    if not events:
        console.print(f"[yellow]No events for aggregate {aggregate_id}[/yellow]")
        return

    table = Table(title=f"Aggregate: {aggregate_id}")
    table.add_column("Version", style="cyan", justify="right")
    table.add_column("Type", style="green")
    table.add_column("Timestamp", style="dim")
    for ev in events:
        table.add_row(str(ev.version), ev.type, ev.timestamp or "N/A")
    console.print(table)

    if show_payload:
        for ev in events:
            console.print(f"\n[bold cyan]Version {ev.version}[/bold cyan] payload:")
            console.print(Syntax(json.dumps(ev.payload, indent=2), "json", theme="monokai"))

    console.print(f"\n[bold]Total events:[/bold] {len(events)}")
