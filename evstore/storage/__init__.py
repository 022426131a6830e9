"""
Event storage adapters and grouped commits.

This module provides:
- StorageAdapter: Abstract interface every backend implements
- GroupedEventTarget: Capability required to join a grouped commit
- InMemoryStorageAdapter: In-memory per-aggregate event log
- push_event_group: Grouped commit coordinator with compensation
- Page token helpers for list_aggregate_ids
"""

from .adapter import (
    StorageAdapter,
    GroupedEventTarget,
    GroupedEvent,
    GetEventsResult,
    ListAggregateIdsResult,
    GroupedEventResult,
    PushEventGroupResult,
)
from .grouped import push_event_group, validate_group
from .memory import InMemoryStorageAdapter
from .pagination import AggregateIdsFilter, encode_page_token, decode_page_token

__all__ = [
    "StorageAdapter",
    "GroupedEventTarget",
    "GroupedEvent",
    "GetEventsResult",
    "ListAggregateIdsResult",
    "GroupedEventResult",
    "PushEventGroupResult",
    "push_event_group",
    "validate_group",
    "InMemoryStorageAdapter",
    "AggregateIdsFilter",
    "encode_page_token",
    "decode_page_token",
]
