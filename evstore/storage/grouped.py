"""
Grouped commit coordinator.

Pushes a batch of staged events, possibly spanning several independent event
logs, as one logical transaction. Member pushes run in the given order; if one
fails, the writes already made are removed in reverse order (compensation)
and the failure is re-raised.

This is a best-effort saga, not two-phase commit: state is only guaranteed
clean when no one else mutates the same aggregates during the commit window
and compensation itself succeeds. When it does not, EventGroupRollbackError
reports exactly which writes were left behind.
"""

from typing import List, Sequence, Tuple

from ..core.errors import (
    EventGroupRollbackError,
    IncompatibleAdapterError,
    MissingContextError,
    ValidationError,
)
from ..core.events import Event, require_context
from ..logging_config import get_logger
from ..metrics import track_group, track_group_duration
from .adapter import GroupedEvent, GroupedEventResult, GroupedEventTarget, PushEventGroupResult

_Committed = Tuple[GroupedEventTarget, Event]


def validate_group(grouped_events: Sequence[GroupedEvent]) -> None:
    """
    Check a group before any mutation.

    Raises:
        ValidationError: If the group is empty
        MissingContextError: If a member has no context / event_store_id
        IncompatibleAdapterError: If a member adapter cannot join a group
    """
    if not grouped_events:
        raise ValidationError("event group must contain at least one grouped event")

    for index, grouped_event in enumerate(grouped_events):
        try:
            require_context(grouped_event.context)
        except MissingContextError as e:
            raise MissingContextError(
                f"grouped event #{index} ({grouped_event.event.aggregate_id}) has no context"
            ) from e

        if not isinstance(grouped_event.adapter, GroupedEventTarget):
            raise IncompatibleAdapterError(
                f"grouped event #{index} targets {type(grouped_event.adapter).__name__}, "
                f"which does not support grouped commits"
            )


def _compensate(committed: List[_Committed], error: BaseException, logger) -> None:
    """
    Undo committed writes in reverse commit order.

    Returns normally when every write was removed.

    Raises:
        EventGroupRollbackError: If any removal failed (chained from error)
    """
    failures: List[Tuple[str, int, BaseException]] = []
    for adapter, event in reversed(committed):
        try:
            adapter.remove_event_sync(event.aggregate_id, event.version)
        except Exception as ex:
            failures.append((event.aggregate_id, event.version, ex))
            logger.error(
                "Event group compensation failed",
                extra={
                    "aggregate_id": event.aggregate_id,
                    "version": event.version,
                    "error": repr(ex),
                },
            )

    if failures:
        track_group("rollback_failed")
        raise EventGroupRollbackError(error, failures) from error

    track_group("rolled_back")
    logger.warning(
        "Event group rolled back",
        extra={"reverted": len(committed), "error": repr(error)},
    )


async def push_event_group(*grouped_events: GroupedEvent) -> PushEventGroupResult:
    """
    Commit grouped events with all-or-nothing semantics via compensation.

    Args:
        grouped_events: Staged events in commit order

    Returns:
        PushEventGroupResult with persisted events in commit order

    Raises:
        ValidationError: Before any mutation, for an invalid group
        EventGroupRollbackError: If a push failed and compensation was incomplete
        Exception: The failing member's error, after a complete rollback
    """
    validate_group(grouped_events)

    logger = get_logger(__name__, trace_id=grouped_events[0].context.event_store_id)
    committed: List[_Committed] = []

    # No await below: the whole commit runs without yielding to other tasks
    with track_group_duration():
        for grouped_event in grouped_events:
            adapter = grouped_event.adapter
            try:
                persisted = adapter.push_event_sync(grouped_event.event, grouped_event.context)
            except Exception as e:
                logger.info(
                    "Event group member push failed, rolling back",
                    extra={
                        "aggregate_id": grouped_event.event.aggregate_id,
                        "version": grouped_event.event.version,
                        "committed": len(committed),
                    },
                )
                _compensate(committed, e, logger)
                raise
            committed.append((adapter, persisted))

    track_group("committed")
    logger.debug("Event group committed", extra={"size": len(committed)})
    return PushEventGroupResult(
        event_group=[GroupedEventResult(event=event) for _, event in committed]
    )
