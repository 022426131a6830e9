"""
Event model for per-aggregate event logs.

Events are immutable facts about one aggregate at one version.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .clock import parse_timestamp
from .errors import MissingContextError, ValidationError

_KNOWN_KEYS = frozenset(
    {"aggregate_id", "aggregateId", "version", "type", "timestamp", "payload", "metadata"}
)


@dataclass(frozen=True)
class Event:
    """
    Immutable event record.

    Fields:
        aggregate_id: Target aggregate identifier (non-empty)
        version: Position in the aggregate history (positive, unique per aggregate)
        type: Event type (e.g., "OrderPlaced")
        timestamp: ISO-8601 string (assigned by the log when omitted)
        payload: Event-specific data, opaque to the log
        metadata: Caller metadata (user, reason, etc.), opaque to the log
    """
    aggregate_id: str
    version: int
    type: str
    timestamp: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.aggregate_id, str) or not self.aggregate_id:
            raise ValidationError("Event.aggregate_id must be a non-empty string")
        # bool is an int subclass but never a valid version
        if isinstance(self.version, bool) or not isinstance(self.version, int) or self.version < 1:
            raise ValidationError(
                f"Event.version must be a positive integer, got {self.version!r}"
            )
        if self.timestamp is not None:
            try:
                parse_timestamp(self.timestamp)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Event.timestamp must be ISO-8601, got {self.timestamp!r}") from e

    def with_timestamp(self, timestamp: str) -> "Event":
        return replace(self, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-ready representation.

        Empty payload/metadata and an unset timestamp are omitted.
        """
        data: Dict[str, Any] = {
            "aggregate_id": self.aggregate_id,
            "version": self.version,
            "type": self.type,
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        if self.payload:
            data["payload"] = self.payload
        if self.metadata:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """
        Build an Event from a mapping.

        Accepts snake_case keys and the camelCase "aggregateId" used by
        fixtures exported from other tooling. Unknown top-level keys are
        moved into payload; an explicit payload entry wins over them.

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        aggregate_id = data.get("aggregate_id", data.get("aggregateId"))
        if aggregate_id is None or "version" not in data:
            raise ValidationError("event requires aggregate_id and version")

        for key in ("payload", "metadata"):
            value = data.get(key)
            if value is not None and not isinstance(value, Mapping):
                raise ValidationError(
                    f"event {key} must be an object, got {type(value).__name__}"
                )

        payload = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}
        payload.update(data.get("payload") or {})
        return cls(
            aggregate_id=aggregate_id,
            version=data["version"],
            type=data.get("type", ""),
            timestamp=data.get("timestamp"),
            payload=payload,
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class PushContext:
    """
    Context passed alongside a push.

    event_store_id is used for error attribution and log correlation only;
    it is never stored with the event.
    """
    event_store_id: str


def require_context(context: Optional[PushContext]) -> PushContext:
    """
    Return context if it names an event store.

    Raises:
        MissingContextError: If context is absent or has no event_store_id
    """
    if context is None or not getattr(context, "event_store_id", None):
        raise MissingContextError("push context with event_store_id is required")
    return context
