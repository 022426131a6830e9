import pytest

from evstore.core import Event, FixedClock, PushContext
from evstore.storage import InMemoryStorageAdapter

EVENT_STORE_ID = "eventStoreId"


@pytest.fixture
def context():
    return PushContext(event_store_id=EVENT_STORE_ID)


@pytest.fixture
def clock():
    return FixedClock("2021-01-01T00:00:00.000Z")


@pytest.fixture
def adapter(clock):
    return InMemoryStorageAdapter(clock=clock)


@pytest.fixture
def make_event():
    def _make(aggregate_id="agg-1", version=1, type="EVENT_TYPE", **kwargs):
        return Event(aggregate_id=aggregate_id, version=version, type=type, **kwargs)

    return _make
