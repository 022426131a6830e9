"""
Tests for conflict retries in commands.
"""

import pytest

from evstore.command import Command
from evstore.core import EventAlreadyExistsError, is_event_already_exists_error


@pytest.mark.asyncio
async def test_retries_on_conflict_then_succeeds(adapter, context, make_event):
    """A conflicting handler is rerun until it pushes a fresh version."""
    adapter.push_event_sync(make_event(version=1), context)
    stale_versions = iter([1, 1])

    async def handler(input_, adapters):
        (store,) = adapters
        # first two attempts use a stale read, the third re-reads
        version = next(stale_versions, None)
        if version is None:
            history = (await store.get_events(input_)).events
            version = history[-1].version + 1
        return await store.push_event(make_event(aggregate_id=input_, version=version), context)

    hook_calls = []

    async def on_conflict(error, attempt_number, retries_left):
        hook_calls.append((error.version, attempt_number, retries_left))

    command = Command(
        command_id="append",
        handler=handler,
        required_adapters=[adapter],
        on_event_already_exists=on_conflict,
    )

    persisted = await command.run("agg-1")

    assert persisted.version == 2
    assert hook_calls == [(1, 1, 2), (1, 2, 1)]


@pytest.mark.asyncio
async def test_gives_up_after_retries(adapter, context, make_event):
    """The conflict propagates once retries are exhausted."""
    adapter.push_event_sync(make_event(version=1), context)
    attempts = []

    async def handler(input_, adapters):
        attempts.append(input_)
        return await adapters[0].push_event(make_event(version=1), context)

    command = Command("always-stale", handler, [adapter], event_already_exists_retries=1)

    with pytest.raises(EventAlreadyExistsError):
        await command.run("agg-1")

    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_other_errors_are_not_retried():
    """Non-conflict errors propagate on the first attempt."""
    attempts = []

    async def handler(input_, adapters):
        attempts.append(input_)
        raise KeyError("boom")

    with pytest.raises(KeyError):
        await Command("broken", handler).run("x")

    assert attempts == ["x"]


def test_rejects_negative_retries():
    """A negative retry budget is rejected at construction."""
    async def handler(input_, adapters):
        return None

    with pytest.raises(ValueError):
        Command("bad", handler, event_already_exists_retries=-1)


def test_is_event_already_exists_error():
    """Only EventAlreadyExistsError counts as a retryable conflict."""
    assert is_event_already_exists_error(EventAlreadyExistsError("s", "agg-1", 1))
    assert not is_event_already_exists_error(ValueError("agg-1"))
    assert not is_event_already_exists_error(None)
