"""
Prometheus metrics for evstore.

Metrics are registered lazily on first use and recorded into the default
prometheus_client registry, so an application exposing /metrics picks them up.

Environment Variables:
    EVSTORE_METRICS_ENABLED: Record metrics (true/false) - default: true

Usage:
    from evstore.metrics import track_push, track_group

    track_push("orders")
    with track_group_duration():
        ...
    track_group("committed")
"""

import logging
import os
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

EVENTS_PUSHED: Optional[Counter] = None
PUSH_CONFLICTS: Optional[Counter] = None
EVENT_GROUPS: Optional[Counter] = None
EVENT_GROUP_DURATION: Optional[Histogram] = None

GROUP_OUTCOMES = ("committed", "rolled_back", "rollback_failed")

_metrics_initialized = False
_metrics_lock = threading.Lock()


def metrics_enabled() -> bool:
    return os.getenv("EVSTORE_METRICS_ENABLED", "true").lower() == "true"


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (idempotent).

    Thread-safe via module-level lock.
    """
    global EVENTS_PUSHED, PUSH_CONFLICTS, EVENT_GROUPS, EVENT_GROUP_DURATION
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        EVENTS_PUSHED = Counter(
            "evstore_events_pushed_total",
            "Total number of events persisted to an event log",
            labelnames=["event_store_id"],
        )

        PUSH_CONFLICTS = Counter(
            "evstore_push_conflicts_total",
            "Total number of pushes rejected because the version already exists",
            labelnames=["event_store_id"],
        )

        EVENT_GROUPS = Counter(
            "evstore_event_groups_total",
            "Total number of event group commits by outcome",
            labelnames=["outcome"],
        )

        EVENT_GROUP_DURATION = Histogram(
            "evstore_event_group_duration_seconds",
            "Duration of event group commits (including rollback) in seconds",
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
        )

        _metrics_initialized = True
        logger.debug("Prometheus metrics initialized")


def track_push(event_store_id: str) -> None:
    if not metrics_enabled():
        return
    init_metrics()
    EVENTS_PUSHED.labels(event_store_id=event_store_id).inc()


def track_conflict(event_store_id: str) -> None:
    if not metrics_enabled():
        return
    init_metrics()
    PUSH_CONFLICTS.labels(event_store_id=event_store_id).inc()


def track_group(outcome: str) -> None:
    """
    Count an event group commit.

    Args:
        outcome: One of GROUP_OUTCOMES
    """
    if outcome not in GROUP_OUTCOMES:
        raise ValueError(f"unknown event group outcome: {outcome}")
    if not metrics_enabled():
        return
    init_metrics()
    EVENT_GROUPS.labels(outcome=outcome).inc()


@contextmanager
def track_group_duration() -> Generator[None, None, None]:
    if not metrics_enabled():
        yield
        return

    init_metrics()
    with EVENT_GROUP_DURATION.time():
        yield
