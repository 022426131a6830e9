"""
Clock implementations for event timestamp assignment.

Logs stamp events that arrive without a timestamp. Production code uses
the wall clock; tests pin time with FixedClock.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


def format_timestamp(dt: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision.

    Example: 2021-01-01T00:00:00.000Z
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(ts: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Accepts a trailing "Z". Naive values are taken as UTC.

    Raises:
        TypeError: If ts is not a string
        ValueError: If ts is not ISO-8601
    """
    if not isinstance(ts, str):
        raise TypeError(f"timestamp must be a string, got {type(ts).__name__}")
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class SystemClock:
    """Wall clock time source."""

    def now(self) -> str:
        return format_timestamp(datetime.now(timezone.utc))


@dataclass
class FixedClock:
    """
    Deterministic time source.

    Returns the same timestamp until moved with set(). Used in tests so
    that assigned timestamps are known in advance.
    """
    current: str = "1970-01-01T00:00:00.000Z"

    def now(self) -> str:
        """Get current timestamp without advancing."""
        return self.current

    def set(self, ts: str) -> None:
        # validate eagerly so a typo fails at the call site
        parse_timestamp(ts)
        self.current = ts
