"""Command implementations for the evstore CLI."""
