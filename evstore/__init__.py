"""
In-memory event-sourcing storage engine

Per-aggregate append-only event logs with optimistic concurrency control,
paginated aggregate listing and grouped multi-log commits with compensation.
"""

__version__ = "0.1.0"
