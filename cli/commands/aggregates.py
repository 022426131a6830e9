"""
Aggregates command: list aggregate ids by initial event timestamp
"""

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from evstore.core import EventStoreError, canonical_json_str
from cli.fixture import load_adapter

console = Console()


def aggregates_command(
    fixture_path: str = typer.Argument(..., help="Events file (JSON array, {\"events\": [...]} or JSONL)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Page size"),
    after: Optional[str] = typer.Option(None, "--after", help="Initial event at or after (ISO-8601)"),
    before: Optional[str] = typer.Option(None, "--before", help="Initial event at or before (ISO-8601)"),
    reverse: bool = typer.Option(False, "--reverse", "-r", help="Newest aggregates first"),
    page_token: Optional[str] = typer.Option(
        None, "--page-token", help="Token from a previous page (overrides other filters)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List aggregate ids, one page at a time.

    Examples:
        evstore aggregates events.json
        evstore aggregates events.json --limit 10 --after 2021-01-01T00:00:00.000Z
        evstore aggregates events.json --page-token '<token>' --json
    """
    try:
        adapter = load_adapter(fixture_path)
        result = asyncio.run(
            adapter.list_aggregate_ids(
                limit=limit,
                initial_event_after=after,
                initial_event_before=before,
                reverse=reverse,
                page_token=page_token,
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

    if json_output:
        output = {"aggregate_ids": result.aggregate_ids, "count": len(result.aggregate_ids)}
        if result.next_page_token is not None:
            output["next_page_token"] = result.next_page_token
        print(canonical_json_str(output, indent=2))
        return

    if not result.aggregate_ids:
        console.print("[yellow]No aggregates match the filters[/yellow]")
        return

    table = Table(title="Aggregates")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Aggregate ID", style="yellow")
    for idx, aggregate_id in enumerate(result.aggregate_ids, start=1):
        table.add_row(str(idx), aggregate_id)
    console.print(table)

    if result.next_page_token is not None:
        console.print(f"\n[bold]Next page token:[/bold] {result.next_page_token}")
