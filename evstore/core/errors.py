"""
Exception types for the event storage engine.
"""

from typing import Any, List, Tuple


class EventStoreError(Exception):
    """Raised when event store operations fail."""
    pass


class EventAlreadyExistsError(EventStoreError):
    """
    Raised when (aggregate_id, version) is already present in a log.

    Recoverable: re-read the aggregate, recompute and push with a new version.
    """

    def __init__(self, event_store_id: str, aggregate_id: str, version: int) -> None:
        self.event_store_id = event_store_id
        self.aggregate_id = aggregate_id
        self.version = version
        super().__init__(
            f"Event already exists for aggregate {aggregate_id} "
            f"and version {version} in event store {event_store_id}"
        )


class ValidationError(EventStoreError):
    """Raised before any mutation when a call's inputs are invalid."""
    pass


class MissingContextError(ValidationError):
    """Raised when a push has no context or the context lacks event_store_id."""
    pass


class IncompatibleAdapterError(ValidationError):
    """Raised when a grouped event targets an adapter that cannot join a group."""
    pass


class InvalidPageTokenError(ValidationError):
    """Raised when a page token cannot be decoded."""
    pass


class EventGroupRollbackError(EventStoreError):
    """
    Raised when an event group failed AND compensation could not undo every write.

    Fields:
        original_error: The push error that triggered the rollback
        failures: (aggregate_id, version, exception) for each write left behind
    """

    def __init__(
        self,
        original_error: BaseException,
        failures: List[Tuple[str, int, BaseException]],
    ) -> None:
        self.original_error = original_error
        self.failures = failures
        left = ", ".join(f"{agg}@{ver}" for agg, ver, _ in failures)
        super().__init__(
            f"event group rollback incomplete after {type(original_error).__name__}: "
            f"could not remove {left}"
        )


def is_event_already_exists_error(error: Any) -> bool:
    return isinstance(error, EventAlreadyExistsError)
