#!/usr/bin/env python3
"""
evstore CLI

Main entrypoint for the evstore command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import aggregates, events
from evstore.logging_config import setup_logging

app = typer.Typer(
    name="evstore",
    help="Inspect event fixtures through the in-memory event storage engine",
    add_completion=False,
)

console = Console()

app.command("events")(events.events_command)
app.command("aggregates")(aggregates.aggregates_command)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from evstore import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]evstore CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")
    table.add_row("Storage", "in-memory")

    console.print(table)


def main():
    """Main entrypoint."""
    setup_logging()
    app()


if __name__ == "__main__":
    main()
