"""
Core primitives for the event storage engine.

- Event / PushContext: event records and push context
- Errors: EventAlreadyExistsError and the validation taxonomy
- Clock: timestamp sources (system and fixed)
- Canonical: deterministic JSON serialization
"""

from .events import Event, PushContext, require_context
from .canonical import canonicalize, canonical_json_str
from .clock import SystemClock, FixedClock, format_timestamp, parse_timestamp
from .errors import (
    EventStoreError,
    EventAlreadyExistsError,
    ValidationError,
    MissingContextError,
    IncompatibleAdapterError,
    InvalidPageTokenError,
    EventGroupRollbackError,
    is_event_already_exists_error,
)

__all__ = [
    "Event",
    "PushContext",
    "require_context",
    "canonicalize",
    "canonical_json_str",
    "SystemClock",
    "FixedClock",
    "format_timestamp",
    "parse_timestamp",
    "EventStoreError",
    "EventAlreadyExistsError",
    "ValidationError",
    "MissingContextError",
    "IncompatibleAdapterError",
    "InvalidPageTokenError",
    "EventGroupRollbackError",
    "is_event_already_exists_error",
]
