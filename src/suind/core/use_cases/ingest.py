from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from suind.core.interfaces import IEventSource, IEventSubscription
from suind.core.models import EngineStats, EventCursor, EventRecord
from suind.core.use_cases.dispatch import Dispatcher

logger = logging.getLogger(__name__)

_END = object()
_STOPPED = object()


class EngineState(str, Enum):
    IDLE = "idle"
    SUBSCRIBE_ATTEMPT = "subscribe_attempt"
    STREAMING = "streaming"
    POLLING = "polling"
    TERMINATED = "terminated"


class IngestionEngine:
    """
    Acquire events for one package module and hand each one to the dispatcher.

    The engine first tries a push subscription. If opening it fails for any
    reason it switches to cursor polling for the rest of its life. Once
    streaming, an error or a closed channel terminates the engine: there is
    no late fallback to polling and no re-subscription.

    Parameters
    ----------
    source : IEventSource
        Push/poll provider of EventRecords.
    dispatcher : Dispatcher
        Synchronous per-event handler.
    package_id, module : str
        MoveModule filter of the subscription and of every poll.
    poll_interval_ms : int
        Sleep between two poll requests.
    page_size : int | None
        Page limit sent with each poll (None = source default).
    stop_event : asyncio.Event | None
        Optional cancellation token, checked at every suspension point.
    sleep : callable
        Injected for tests; defaults to `asyncio.sleep`.
    """

    def __init__(
        self,
        source: IEventSource,
        dispatcher: Dispatcher,
        *,
        package_id: str,
        module: str,
        poll_interval_ms: int = 1000,
        page_size: int | None = None,
        stop_event: asyncio.Event | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._dispatcher = dispatcher
        self.package_id = package_id
        self.module = module
        self.poll_interval_s = poll_interval_ms / 1000
        self.page_size = page_size
        self._stop = stop_event
        self._sleep = sleep

        self._state = EngineState.IDLE
        self._cursor: EventCursor | None = None
        self.stats = EngineStats(history=[EngineState.IDLE.value])

    # ---------- observability ----------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def cursor(self) -> EventCursor | None:
        return self._cursor

    def _transition(self, new: EngineState) -> None:
        logger.debug("Engine %s -> %s", self._state.value, new.value)
        self._state = new
        self.stats.history.append(new.value)
        if new in (EngineState.STREAMING, EngineState.POLLING):
            self.stats.mode = new.value

    # ---------- suspension points ----------

    async def _until_stopped(self, aw: Awaitable[Any]) -> Any:
        """Await `aw` unless the stop token fires first (then return _STOPPED)."""
        if self._stop is None:
            return await aw
        task = asyncio.ensure_future(aw)
        if self._stop.is_set():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            return _STOPPED
        stopper = asyncio.ensure_future(self._stop.wait())
        try:
            done, _ = await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for fut in (task, stopper):
                if not fut.done():
                    fut.cancel()
        if task in done:
            return task.result()
        await asyncio.gather(task, return_exceptions=True)
        return _STOPPED

    # ---------- main loop ----------

    async def run(self) -> None:
        """Run until terminated (stream end/error, stop token, or task cancellation)."""
        if self._state is not EngineState.IDLE:
            raise RuntimeError(f"engine already started (state={self._state.value})")

        self._transition(EngineState.SUBSCRIBE_ATTEMPT)
        try:
            try:
                sub = await self._until_stopped(
                    self._source.subscribe(package_id=self.package_id, module=self.module)
                )
            except Exception as e:
                logger.warning("Subscription failed (%s); falling back to polling", e)
                self._transition(EngineState.POLLING)
                await self._poll_loop()
                return

            if sub is _STOPPED:
                return
            logger.info("Subscribed to %s::%s", self.package_id, self.module)
            self._transition(EngineState.STREAMING)
            await self._stream_loop(sub)
        finally:
            if self._state is not EngineState.TERMINATED:
                self._transition(EngineState.TERMINATED)

    async def _stream_loop(self, sub: IEventSubscription) -> None:
        it = sub.__aiter__()
        try:
            while True:
                try:
                    record = await self._until_stopped(anext(it, _END))
                except Exception as e:
                    logger.error("Event stream failed: %s", e)
                    return
                if record is _STOPPED:
                    logger.info("Stop requested; leaving stream")
                    return
                if record is _END:
                    logger.warning("Event stream closed by the node")
                    return
                self._deliver(record)
        finally:
            try:
                await sub.aclose()
            except Exception as e:
                logger.debug("Error closing subscription: %s", e)

    async def _poll_loop(self) -> None:
        while True:
            if self._stop is not None and self._stop.is_set():
                return
            try:
                page = await self._until_stopped(
                    self._source.query_events(
                        package_id=self.package_id,
                        module=self.module,
                        cursor=self._cursor,
                        limit=self.page_size,
                    )
                )
            except Exception as e:
                self.stats.poll_failures += 1
                logger.error("Failed to query events (cursor=%s): %s", self._cursor, e)
                page = None
            else:
                if page is _STOPPED:
                    return
                self.stats.polls += 1

            if page is not None:
                for record in page.data:
                    self._deliver(record)
                if page.next_cursor is not None:
                    self._cursor = page.next_cursor

            if await self._until_stopped(self._sleep(self.poll_interval_s)) is _STOPPED:
                return

    def _deliver(self, record: EventRecord) -> None:
        self.stats.delivered += 1
        self._dispatcher.dispatch(record)
