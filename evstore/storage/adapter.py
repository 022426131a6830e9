"""
StorageAdapter abstract interface.

Defines the contract every event storage backend implements, plus the narrow
capability a backend must expose to take part in a grouped commit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.events import Event, PushContext


@dataclass(frozen=True)
class GetEventsResult:
    events: List[Event] = field(default_factory=list)


@dataclass(frozen=True)
class ListAggregateIdsResult:
    """
    One page of aggregate ids.

    next_page_token is None on the last page.
    """
    aggregate_ids: List[str] = field(default_factory=list)
    next_page_token: Optional[str] = None


@dataclass(frozen=True)
class GroupedEventResult:
    event: Event


@dataclass(frozen=True)
class PushEventGroupResult:
    """Persisted events of a committed group, in commit order."""
    event_group: List[GroupedEventResult] = field(default_factory=list)


@dataclass
class GroupedEvent:
    """
    An event staged for a grouped commit.

    Lives for one push_event_group call and is never persisted. The context
    may be filled in after construction (e.g. by the code that knows which
    event store the event belongs to).

    Fields:
        event: Event to push
        adapter: Event log the event will be pushed to
        context: Push context (required by the time the group is pushed)
    """
    event: Event
    adapter: "StorageAdapter"
    context: Optional[PushContext] = None


class StorageAdapter(ABC):
    """
    Abstract event storage interface.

    All implementations must guarantee:
    - Append-only (no updates; deletes only through group compensation)
    - (aggregate_id, version) uniqueness
    - Ascending version order per aggregate
    """

    @abstractmethod
    async def push_event(self, event: Event, context: PushContext) -> Event:
        """
        Append event to its aggregate history.

        Returns:
            The persisted event (timestamp resolved)

        Raises:
            EventAlreadyExistsError: If the version is already taken
            MissingContextError: If context has no event_store_id
        """
        ...

    @abstractmethod
    async def get_events(
        self,
        aggregate_id: str,
        min_version: Optional[int] = None,
        max_version: Optional[int] = None,
        limit: Optional[int] = None,
        reverse: bool = False,
    ) -> GetEventsResult:
        """
        Read one aggregate history.

        Args:
            aggregate_id: Aggregate to read (unknown id = empty result)
            min_version: Inclusive lower bound
            max_version: Inclusive upper bound
            limit: Max events, applied after filtering and ordering
            reverse: Descending version order
        """
        ...

    @abstractmethod
    async def list_aggregate_ids(
        self,
        limit: Optional[int] = None,
        initial_event_after: Optional[str] = None,
        initial_event_before: Optional[str] = None,
        reverse: bool = False,
        page_token: Optional[str] = None,
    ) -> ListAggregateIdsResult:
        """
        List aggregate ids ordered by initial event timestamp.

        When page_token is given, it alone defines the filter.
        """
        ...

    def group_event(self, event: Event, context: Optional[PushContext] = None) -> GroupedEvent:
        """Stage event for a grouped commit on this adapter. No I/O."""
        return GroupedEvent(event=event, adapter=self, context=context)

    @abstractmethod
    async def push_event_group(self, *grouped_events: GroupedEvent) -> PushEventGroupResult:
        """
        Push events to one or more adapters as a single logical transaction.

        Raises:
            ValidationError: Before any mutation, for an invalid group
            Exception: The first member push error, after rollback
        """
        ...


class GroupedEventTarget(ABC):
    """
    Capability required of every adapter in a grouped commit.

    Both methods are synchronous: the coordinator must observe a failure
    before moving to the next member, and undo writes in strict reverse order.
    """

    @abstractmethod
    def push_event_sync(self, event: Event, context: PushContext) -> Event:
        """Same semantics as push_event, without suspension."""
        ...

    @abstractmethod
    def remove_event_sync(self, aggregate_id: str, version: int) -> None:
        """
        Remove a previously pushed event (compensation only).

        Raises:
            EventStoreError: If the event is not present
        """
        ...
