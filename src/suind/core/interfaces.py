from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from suind.core.models import EventCursor, EventPage, EventRecord, HolderBalance

if TYPE_CHECKING:
    from suind.decoding.specs import EventRegistry


# ---------------------------------------------------------------------------
# IEventSubscription / IEventSource
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventSubscription(Protocol):
    """
    Live push channel of events, as returned by `IEventSource.subscribe`.

    Iteration yields EventRecords in delivery order until the channel closes
    (iteration ends) or fails (iteration raises).
    """

    def __aiter__(self) -> AsyncIterator[EventRecord]:
        ...

    async def aclose(self) -> None:
        """Release the underlying transport."""
        ...


@runtime_checkable
class IEventSource(Protocol):
    """
    Abstract provider of events for one package module.

    Domain expectations:
    - It returns EventRecord objects already mapped into internal domain models.
    - It hides the underlying RPC / websocket technology.
    """

    async def subscribe(self, *, package_id: str, module: str) -> IEventSubscription:
        """
        Open a push subscription filtered to `package_id::module`.

        Raises if the subscription cannot be established (rejected,
        unsupported, network error).
        """
        ...

    async def query_events(
        self,
        *,
        package_id: str,
        module: str,
        cursor: EventCursor | None,
        limit: int | None,
    ) -> EventPage:
        """
        Return the page of events following `cursor` (oldest first).

        A None `next_cursor` on the page means "ask again with the same cursor".
        """
        ...


# ---------------------------------------------------------------------------
# IPersistenceGateway
# ---------------------------------------------------------------------------

class PersistenceError(RuntimeError):
    """A store operation failed."""


@runtime_checkable
class IPersistenceGateway(Protocol):
    """
    Write side of the store used by the dispatcher.

    Domain expectations:
    - `append` always inserts (no dedup).
    - `upsert_balance` is keyed by wallet address, last write wins.
    - `transaction()` groups the writes of one event.
    """

    def append(self, table: str, row: dict[str, Any]) -> None:
        ...

    def upsert_balance(self, address: str, balance: int, timestamp: datetime | None) -> None:
        ...

    def get_balance(self, address: str) -> HolderBalance | None:
        ...

    def transaction(self) -> AbstractContextManager[Any]:
        ...


# ---------------------------------------------------------------------------
# IEventRegistryProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventRegistryProvider(Protocol):
    """
    Abstract provider of EventRegistry objects used for decoding events.

    How the registry is built (static signatures, on-chain module ABI...) is an
    infrastructure concern.
    """

    def get_registry(self) -> EventRegistry:
        """Return a fully configured EventRegistry instance."""
        ...
