from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from suind.core.models import EventCursor, EventPage, EventRecord
from suind.decoding.bcs import encode_value
from suind.decoding.registries import make_launchpad_registry
from suind.decoding.specs import EventRegistry, EventSpec
from suind.storage.gateway import DuckDBGateway

PACKAGE_ID = "0x" + "ab" * 32
MODULE = "launchpad"

W1 = "0x" + "11" * 32
W2 = "0x" + "22" * 32
LAUNCHPAD = "0x" + "cc" * 32


def spec_by_name(registry: EventRegistry, name: str) -> EventSpec:
    return next(s for s in registry.values() if s.name == name)


def bcs_payload(spec: EventSpec, **values: Any) -> bytes:
    return b"".join(encode_value(f.type, values[f.name]) for f in spec.fields)


class FakeSubscription:
    """Async iterator over fixed records; optionally fails after them."""

    def __init__(self, records: list[EventRecord], error: Exception | None = None) -> None:
        self.records = list(records)
        self.error = error
        self.closed = False

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for r in self.records:
            yield r
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def registry() -> EventRegistry:
    return make_launchpad_registry(PACKAGE_ID)


@pytest.fixture
def make_record(registry: EventRegistry) -> Callable[..., EventRecord]:
    def _make(
        name: str,
        /,
        *,
        tx: str = "tx1",
        emitted_at: int | None = 1_700_000_000_000,
        cursor: EventCursor | None = None,
        **values: Any,
    ) -> EventRecord:
        spec = spec_by_name(registry, name)
        return EventRecord(
            event_type=spec.event_type,
            payload=bcs_payload(spec, **values),
            transaction_id=tx,
            emitted_at=emitted_at,
            sequence_cursor=cursor,
        )

    return _make


@pytest.fixture
def gateway(registry: EventRegistry):
    gw = DuckDBGateway(":memory:")
    gw.provision_schema(registry)
    yield gw
    gw.close()


@pytest.fixture
def mock_source():
    source = AsyncMock()
    source.subscribe = AsyncMock(side_effect=ConnectionError("no websocket"))
    source.query_events = AsyncMock(return_value=EventPage(data=[], next_cursor=None))
    source.aclose = AsyncMock()
    return source


@pytest.fixture
def fake_subscription() -> type[FakeSubscription]:
    return FakeSubscription
