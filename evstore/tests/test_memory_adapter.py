"""
Tests for the in-memory storage adapter: pushes and range reads.

Goal: (aggregate_id, version) is unique, reads honor every option.
"""

import threading

import pytest

from evstore.core import (
    Event,
    EventAlreadyExistsError,
    EventStoreError,
    MissingContextError,
    PushContext,
    ValidationError,
)
from evstore.storage import GroupedEvent, InMemoryStorageAdapter

EVENT_1 = Event(aggregate_id="agg-1", version=1, type="EVENT_TYPE", timestamp="2021-01-01T00:00:00.000Z")
EVENT_2 = Event(aggregate_id="agg-1", version=2, type="EVENT_TYPE", timestamp="2022-01-01T00:00:00.000Z")


def test_constructor_seeds_initial_events():
    """initial_events are stored as given."""
    adapter = InMemoryStorageAdapter(initial_events=[EVENT_1, EVENT_2])

    assert adapter.dump() == {"agg-1": [EVENT_1, EVENT_2]}


def test_constructor_rejects_duplicate_initial_events():
    """Duplicate initial events conflict under the initial_events store id."""
    with pytest.raises(EventAlreadyExistsError) as exc_info:
        InMemoryStorageAdapter(initial_events=[EVENT_1, EVENT_1])

    assert exc_info.value.event_store_id == "initial_events"


@pytest.mark.asyncio
async def test_get_events_unknown_aggregate_is_empty(adapter):
    """An unknown aggregate reads as empty, not an error."""
    result = await adapter.get_events("missing")

    assert result.events == []


@pytest.mark.asyncio
async def test_push_assigns_timestamp(adapter, clock, context, make_event):
    """A push without timestamp gets the clock's time."""
    clock.set("2021-06-01T12:00:00.000Z")

    persisted = await adapter.push_event(make_event(), context)

    assert persisted.timestamp == "2021-06-01T12:00:00.000Z"
    result = await adapter.get_events("agg-1")
    assert result.events == [persisted]


@pytest.mark.asyncio
async def test_push_keeps_caller_timestamp(adapter, context):
    """A caller timestamp is stored unchanged."""
    persisted = await adapter.push_event(EVENT_2, context)

    assert persisted is EVENT_2


@pytest.mark.asyncio
async def test_push_existing_version_conflicts_without_writing(adapter, context, make_event):
    """A repeated version conflicts and leaves the history unchanged."""
    await adapter.push_event(make_event(payload={"n": 1}), context)

    with pytest.raises(EventAlreadyExistsError) as exc_info:
        await adapter.push_event(make_event(payload={"n": 2}), context)

    err = exc_info.value
    assert (err.event_store_id, err.aggregate_id, err.version) == ("eventStoreId", "agg-1", 1)

    result = await adapter.get_events("agg-1")
    assert len(result.events) == 1
    assert result.events[0].payload == {"n": 1}


@pytest.mark.asyncio
async def test_push_requires_context(adapter, make_event):
    """A push without event_store_id writes nothing."""
    with pytest.raises(MissingContextError):
        await adapter.push_event(make_event(), None)

    with pytest.raises(MissingContextError):
        await adapter.push_event(make_event(), PushContext(event_store_id=""))

    assert adapter.dump() == {}


def test_push_event_sync_matches_push_event(adapter, clock, context, make_event):
    """The sync primitive stamps and checks uniqueness like push_event."""
    clock.set("2023-03-03T00:00:00.000Z")
    persisted = adapter.push_event_sync(make_event(), context)

    assert persisted.timestamp == "2023-03-03T00:00:00.000Z"
    with pytest.raises(EventAlreadyExistsError):
        adapter.push_event_sync(make_event(), context)


@pytest.mark.asyncio
async def test_get_events_options():
    """Each read option and their combination match the expected slice."""
    adapter = InMemoryStorageAdapter(initial_events=[EVENT_1, EVENT_2])

    assert (await adapter.get_events("agg-1")).events == [EVENT_1, EVENT_2]
    assert (await adapter.get_events("agg-1", max_version=1)).events == [EVENT_1]
    assert (await adapter.get_events("agg-1", min_version=2)).events == [EVENT_2]
    assert (await adapter.get_events("agg-1", limit=1)).events == [EVENT_1]
    assert (await adapter.get_events("agg-1", reverse=True)).events == [EVENT_2, EVENT_1]
    assert (await adapter.get_events("agg-1", limit=1, reverse=True)).events == [EVENT_2]


@pytest.mark.asyncio
async def test_get_events_version_range(adapter, context, make_event):
    """Version bounds are inclusive; limit applies after ordering."""
    for version in range(1, 8):
        await adapter.push_event(make_event(version=version), context)

    result = await adapter.get_events("agg-1", min_version=3, max_version=5)
    assert [e.version for e in result.events] == [3, 4, 5]

    result = await adapter.get_events("agg-1", min_version=3, max_version=5, reverse=True)
    assert [e.version for e in result.events] == [5, 4, 3]

    result = await adapter.get_events("agg-1", min_version=3, max_version=5, reverse=True, limit=2)
    assert [e.version for e in result.events] == [5, 4]

    result = await adapter.get_events("agg-1", limit=0)
    assert result.events == []


@pytest.mark.asyncio
async def test_get_events_rejects_negative_limit(adapter):
    """A negative limit is a validation error."""
    with pytest.raises(ValidationError):
        await adapter.get_events("agg-1", limit=-1)


@pytest.mark.asyncio
async def test_skipped_and_out_of_order_versions_stay_sorted(adapter, context, make_event):
    """Histories stay sorted by version whatever the push order."""
    await adapter.push_event(make_event(version=5), context)
    await adapter.push_event(make_event(version=2), context)
    await adapter.push_event(make_event(version=9), context)

    result = await adapter.get_events("agg-1")
    assert [e.version for e in result.events] == [2, 5, 9]

    with pytest.raises(EventAlreadyExistsError):
        await adapter.push_event(make_event(version=5), context)


@pytest.mark.asyncio
async def test_returned_events_do_not_alias_storage(adapter, context, make_event):
    """Mutating a result does not change the stored history."""
    await adapter.push_event(make_event(), context)

    result = await adapter.get_events("agg-1")
    result.events.clear()

    assert len((await adapter.get_events("agg-1")).events) == 1


def test_group_event_has_no_side_effects(adapter, make_event):
    """group_event stages without writing."""
    event = make_event()

    grouped = adapter.group_event(event)

    assert isinstance(grouped, GroupedEvent)
    assert grouped.event is event
    assert grouped.adapter is adapter
    assert grouped.context is None
    assert adapter.dump() == {}


def test_remove_event_sync(adapter, context, make_event):
    """Removal drops one event and the aggregate once empty."""
    adapter.push_event_sync(make_event(version=1), context)
    adapter.push_event_sync(make_event(version=2), context)

    adapter.remove_event_sync("agg-1", 2)
    assert [e.version for e in adapter.dump()["agg-1"]] == [1]

    adapter.remove_event_sync("agg-1", 1)
    assert adapter.dump() == {}

    with pytest.raises(EventStoreError):
        adapter.remove_event_sync("agg-1", 1)


def test_concurrent_pushes_of_same_version_commit_once(adapter, context, make_event):
    """
    Many threads race for the same version; exactly one must win.
    """
    results = []
    barrier = threading.Barrier(8)

    def writer(n):
        barrier.wait()
        try:
            adapter.push_event_sync(make_event(payload={"writer": n}), context)
            results.append("ok")
        except EventAlreadyExistsError:
            results.append("conflict")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == 7
    assert len(adapter.dump()["agg-1"]) == 1
