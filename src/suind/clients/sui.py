"""Async client for the Sui JSON-RPC event API.

This module provides:
- `SuiEventSource`: an `IEventSource` over `suix_queryEvents` (HTTP, httpx)
  and `suix_subscribeEvent` (websocket)
- `parse_event`: mapping of a Sui event JSON object to an `EventRecord`

Only events emitted by one `package::module` are requested (MoveModule filter).
"""

from __future__ import annotations

import base64
import binascii
import itertools
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import base58
import httpx
import websockets
from websockets.exceptions import WebSocketException

from suind.core.interfaces import IEventSource, IEventSubscription
from suind.core.models import EventCursor, EventPage, EventRecord

logger = logging.getLogger(__name__)

QUERY_METHOD = "suix_queryEvents"
SUBSCRIBE_METHOD = "suix_subscribeEvent"


class SourceError(RuntimeError):
    """The node answered with a JSON-RPC error or an unusable payload."""


class SubscriptionError(SourceError):
    """A push subscription could not be established."""


def module_filter(package_id: str, module: str) -> dict[str, Any]:
    return {"MoveModule": {"package": package_id, "module": module}}


def _decode_bcs(raw: str, encoding: str | None) -> bytes:
    # Nodes that predate `bcsEncoding` send base58
    try:
        if encoding == "base64":
            return base64.b64decode(raw, validate=True)
        return base58.b58decode(raw)
    except (binascii.Error, ValueError) as e:
        raise SourceError(f"Undecodable bcs ({encoding or 'base58'}): {e}") from e


def parse_event(obj: dict[str, Any]) -> EventRecord:
    """Map a Sui `SuiEvent` JSON object to an EventRecord."""
    try:
        event_id = obj["id"]
        cursor = EventCursor.from_json(event_id)
        ts = obj.get("timestampMs")
        return EventRecord(
            event_type=obj["type"],
            payload=_decode_bcs(obj["bcs"], obj.get("bcsEncoding")),
            transaction_id=cursor.tx_digest,
            emitted_at=int(ts) if ts is not None else None,
            sequence_cursor=cursor,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SourceError(f"Malformed event object: {e!r}") from e


def _parse_or_skip(obj: Any) -> EventRecord | None:
    """parse_event, but log and return None for an unusable event."""
    try:
        return parse_event(obj)
    except SourceError as e:
        event_type = tx_digest = None
        if isinstance(obj, dict):
            event_type = obj.get("type")
            if isinstance(obj.get("id"), dict):
                tx_digest = obj["id"].get("txDigest")
        logger.error("Skipping event %s (tx %s): %s", event_type, tx_digest, e)
        return None


class _WebsocketSubscription(IEventSubscription):
    """Notifications of one `suix_subscribeEvent` subscription."""

    def __init__(self, ws: Any, subscription_id: Any) -> None:
        self._ws = ws
        self.subscription_id = subscription_id

    def __aiter__(self) -> AsyncIterator[EventRecord]:
        return self._records()

    async def _records(self) -> AsyncIterator[EventRecord]:
        # Clean close ends the iteration, abnormal close raises ConnectionClosedError
        async for message in self._ws:
            try:
                data = json.loads(message)
            except ValueError as e:
                logger.error("Skipping undecodable websocket message: %s", e)
                continue
            if not isinstance(data, dict) or data.get("method") != SUBSCRIBE_METHOD:
                logger.debug("Ignoring websocket message: %s", data)
                continue
            params = data.get("params") or {}
            if params.get("subscription") != self.subscription_id:
                continue
            record = _parse_or_skip(params.get("result"))
            if record is not None:
                yield record

    async def aclose(self) -> None:
        await self._ws.close()


class SuiEventSource(IEventSource):
    """Sui event source over JSON-RPC.

    Parameters
    ----------
    rpc_url : str
        HTTP(S) JSON-RPC endpoint.
    ws_url : str | None
        Websocket endpoint; None disables push subscriptions.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write, websocket ack).
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (tests use `httpx.MockTransport`).
    connect : callable | None
        Optional websocket connect override; defaults to `websockets.connect`.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        ws_url: str | None = None,
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
        connect: Callable[..., Any] | None = None,
    ) -> None:
        self.url = rpc_url
        self.ws_url = ws_url
        self.timeout_s = timeout_s
        self._connect = connect or websockets.connect
        self._ids = itertools.count(1)
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(max_connections=8, max_keepalive_connections=4),
            http2=True,
            transport=transport,
        )

    def _request(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

    async def _call(self, method: str, params: list[Any]) -> Any:
        r = await self.client.post(self.url, json=self._request(method, params))
        r.raise_for_status()
        data = r.json()
        if "error" in data:
            e = data["error"]
            raise SourceError(f"RPC error: {e.get('code')} {e.get('message')}")
        return data.get("result")

    async def query_events(
        self,
        *,
        package_id: str,
        module: str,
        cursor: EventCursor | None,
        limit: int | None,
    ) -> EventPage:
        """Fetch the page of events after `cursor`, oldest first."""
        params = [
            module_filter(package_id, module),
            cursor.to_json() if cursor is not None else None,
            limit,
            False,
        ]
        result = await self._call(QUERY_METHOD, params)
        if not isinstance(result, dict):
            raise SourceError(f"Unexpected {QUERY_METHOD} result: {result!r}")

        # A bad event is dropped, the page's nextCursor still moves past it
        records = [_parse_or_skip(ev) for ev in result.get("data", [])]
        next_cursor = result.get("nextCursor")
        return EventPage(
            data=[r for r in records if r is not None],
            next_cursor=EventCursor.from_json(next_cursor) if next_cursor else None,
            has_next_page=bool(result.get("hasNextPage", False)),
        )

    async def subscribe(self, *, package_id: str, module: str) -> IEventSubscription:
        """Open a websocket subscription; raises SubscriptionError if not acknowledged."""
        if not self.ws_url:
            raise SubscriptionError(f"No websocket endpoint for {self.url}")

        try:
            ws = await self._connect(self.ws_url, open_timeout=self.timeout_s, ping_interval=20, max_size=2**22)
        except (OSError, WebSocketException) as e:
            raise SubscriptionError(f"Websocket connect to {self.ws_url} failed: {e}") from e

        handed_off = False
        try:
            request = self._request(SUBSCRIBE_METHOD, [module_filter(package_id, module)])
            await ws.send(json.dumps(request))
            # Notifications cannot arrive before the ack, so the first reply is it
            reply = json.loads(await ws.recv())
            if "error" in reply:
                e = reply["error"]
                raise SubscriptionError(f"Subscription rejected: {e.get('code')} {e.get('message')}")
            if reply.get("id") != request["id"] or reply.get("result") is None:
                raise SubscriptionError(f"Unexpected subscription reply: {reply}")
            logger.debug("Subscription id %s on %s", reply["result"], self.ws_url)
            sub = _WebsocketSubscription(ws, reply["result"])
            handed_off = True
            return sub
        except (OSError, ValueError, WebSocketException) as e:
            raise SubscriptionError(f"Subscription handshake failed: {e}") from e
        finally:
            # Runs on cancellation too
            if not handed_off:
                await ws.close()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
