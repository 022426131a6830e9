"""
In-memory event storage adapter.

Each adapter instance owns its own aggregate map; independent instances can
coexist and be combined in one grouped commit.
"""

import threading
from bisect import bisect_left
from typing import Dict, Iterable, List, Optional

from ..core.clock import SystemClock
from ..core.errors import EventAlreadyExistsError, EventStoreError, ValidationError
from ..core.events import Event, PushContext, require_context
from ..logging_config import get_logger
from ..metrics import track_conflict, track_push
from .adapter import (
    GetEventsResult,
    GroupedEvent,
    GroupedEventTarget,
    ListAggregateIdsResult,
    PushEventGroupResult,
    StorageAdapter,
)
from .grouped import push_event_group
from .pagination import paginate_aggregate_ids, resolve_filter

INITIAL_EVENTS_STORE_ID = "initial_events"


class InMemoryStorageAdapter(StorageAdapter, GroupedEventTarget):
    """
    In-memory append-only event storage.

    Storage: dict aggregate_id -> list of events sorted by ascending version.
    Dict insertion order is the tie-break when two aggregates share an
    initial event timestamp.

    Guarantees:
    - (aggregate_id, version) uniqueness, checked and written under one lock
    - Stored events are never mutated; removal only via remove_event_sync
    - No persistence: state lives as long as the instance
    """

    def __init__(
        self,
        initial_events: Optional[Iterable[Event]] = None,
        clock=None,
    ) -> None:
        """
        Initialize in-memory adapter.

        Args:
            initial_events: Events to seed the log with (timestamps assigned if missing)
            clock: Object with now() -> ISO-8601 str (default: SystemClock)

        Raises:
            EventAlreadyExistsError: If initial_events repeat a version
        """
        self.clock = clock or SystemClock()
        self._events: Dict[str, List[Event]] = {}
        # re-entrant: push_event delegates to push_event_sync under the same lock
        self._lock = threading.RLock()

        if initial_events:
            context = PushContext(event_store_id=INITIAL_EVENTS_STORE_ID)
            for event in initial_events:
                self.push_event_sync(event, context)

    def dump(self) -> Dict[str, List[Event]]:
        """Copy of the aggregate map, for inspection."""
        with self._lock:
            return {aggregate_id: list(events) for aggregate_id, events in self._events.items()}

    def push_event_sync(self, event: Event, context: PushContext) -> Event:
        """
        Append event without suspension.

        Used directly by grouped commits so a failure is observed before the
        next member is pushed.

        Returns:
            The persisted event (timestamp resolved)

        Raises:
            MissingContextError: If context has no event_store_id
            EventAlreadyExistsError: If the version is already taken
        """
        context = require_context(context)
        logger = get_logger(__name__, trace_id=context.event_store_id)

        with self._lock:
            history = self._events.get(event.aggregate_id, [])
            versions = [e.version for e in history]
            index = bisect_left(versions, event.version)
            if index < len(versions) and versions[index] == event.version:
                track_conflict(context.event_store_id)
                logger.info(
                    "Event version already exists",
                    extra={"aggregate_id": event.aggregate_id, "version": event.version},
                )
                raise EventAlreadyExistsError(
                    context.event_store_id, event.aggregate_id, event.version
                )

            persisted = event if event.timestamp is not None else event.with_timestamp(self.clock.now())
            history.insert(index, persisted)
            self._events[event.aggregate_id] = history

        track_push(context.event_store_id)
        logger.debug(
            "Pushed event",
            extra={"aggregate_id": persisted.aggregate_id, "version": persisted.version},
        )
        return persisted

    async def push_event(self, event: Event, context: PushContext) -> Event:
        return self.push_event_sync(event, context)

    def remove_event_sync(self, aggregate_id: str, version: int) -> None:
        """
        Remove one event (group compensation only).

        Drops the aggregate entirely when its history becomes empty, so a
        rolled-back aggregate no longer appears in list_aggregate_ids.

        Raises:
            EventStoreError: If the event is not present
        """
        with self._lock:
            history = self._events.get(aggregate_id, [])
            versions = [e.version for e in history]
            index = bisect_left(versions, version)
            if index >= len(versions) or versions[index] != version:
                raise EventStoreError(
                    f"cannot remove missing event {aggregate_id}@{version}"
                )
            del history[index]
            if not history:
                del self._events[aggregate_id]

    async def get_events(
        self,
        aggregate_id: str,
        min_version: Optional[int] = None,
        max_version: Optional[int] = None,
        limit: Optional[int] = None,
        reverse: bool = False,
    ) -> GetEventsResult:
        if limit is not None and limit < 0:
            raise ValidationError(f"limit must not be negative, got {limit}")

        with self._lock:
            history = list(self._events.get(aggregate_id, []))

        events = [
            e
            for e in history
            if (min_version is None or e.version >= min_version)
            and (max_version is None or e.version <= max_version)
        ]
        if reverse:
            events.reverse()
        if limit is not None:
            events = events[:limit]
        return GetEventsResult(events=events)

    async def list_aggregate_ids(
        self,
        limit: Optional[int] = None,
        initial_event_after: Optional[str] = None,
        initial_event_before: Optional[str] = None,
        reverse: bool = False,
        page_token: Optional[str] = None,
    ) -> ListAggregateIdsResult:
        flt = resolve_filter(
            limit=limit,
            initial_event_after=initial_event_after,
            initial_event_before=initial_event_before,
            reverse=reverse,
            page_token=page_token,
        )

        with self._lock:
            initial_timestamps = [
                (aggregate_id, history[0].timestamp)
                for aggregate_id, history in self._events.items()
            ]

        aggregate_ids, next_page_token = paginate_aggregate_ids(initial_timestamps, flt)
        return ListAggregateIdsResult(aggregate_ids=aggregate_ids, next_page_token=next_page_token)

    async def push_event_group(self, *grouped_events: GroupedEvent) -> PushEventGroupResult:
        return await push_event_group(*grouped_events)
