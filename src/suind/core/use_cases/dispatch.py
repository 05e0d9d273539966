from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from suind.core.interfaces import IEventRegistryProvider, IPersistenceGateway, PersistenceError
from suind.core.ledger import apply_changes, balance_changes
from suind.core.models import DecodedEvent, DispatchStats, EventRecord
from suind.decoding.bcs import DecodeError
from suind.decoding.decoder import decode_event
from suind.decoding.registry import lookup
from suind.decoding.specs import EventSpec, UnknownEventType

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    PERSISTED = "persisted"
    UNKNOWN = "unknown"
    DECODE_FAILED = "decode_failed"
    PERSIST_FAILED = "persist_failed"


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def event_time(event: DecodedEvent) -> datetime | None:
    """Timestamp of the event: source emission time, else the payload's own clock (ms)."""
    ms = event.emitted_at
    if ms is None:
        ms = getattr(event, "timestamp", None)
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def record_row(spec: EventSpec, event: DecodedEvent) -> dict[str, Any]:
    """Persisted row for `event`: payload columns + emitted_at + tx_digest."""
    payload = event.payload()
    row: dict[str, Any] = {}
    for f in spec.fields:
        value = payload[f.name]
        # u256 is stored as text
        row[f.column_name] = str(value) if f.type == "u256" else value
    row["emitted_at"] = event.emitted_at
    row["tx_digest"] = event.transaction_id
    return row


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    """
    Route one delivered EventRecord through lookup → decode → ledger → store.

    Per-event failures (unknown type, decode mismatch, store error) are
    logged and reported as an outcome; they never propagate. A ledger
    overflow is fatal and does propagate.
    """

    def __init__(
        self,
        registry_provider: IEventRegistryProvider,
        gateway: IPersistenceGateway,
    ) -> None:
        self._registry = registry_provider.get_registry()
        self._gateway = gateway
        self.stats = DispatchStats()

    def dispatch(self, record: EventRecord) -> DispatchOutcome:
        try:
            spec = lookup(self._registry, record.event_type)
        except UnknownEventType:
            self.stats.unknown += 1
            logger.warning("Unknown event type: %s (tx %s)", record.event_type, record.transaction_id)
            return DispatchOutcome.UNKNOWN

        try:
            event = decode_event(spec, record)
        except DecodeError as e:
            self.stats.decode_failed += 1
            logger.error(
                "Failed to decode %s (tx %s, %d bytes): %s",
                record.event_type,
                record.transaction_id,
                len(record.payload),
                e,
            )
            return DispatchOutcome.DECODE_FAILED

        try:
            updated = self._persist(spec, event)
        except PersistenceError as e:
            self.stats.persist_failed += 1
            logger.error("Failed to persist %s (tx %s): %s", spec.name, record.transaction_id, e)
            return DispatchOutcome.PERSIST_FAILED

        self.stats.persisted += 1
        self.stats.balances_updated += updated
        logger.debug("Persisted %s into %s (tx %s)", spec.name, spec.table, record.transaction_id)
        return DispatchOutcome.PERSISTED

    def _persist(self, spec: EventSpec, event: DecodedEvent) -> int:
        """Append the record and upsert affected balances in one transaction.

        Returns the number of holder rows written.
        """
        with self._gateway.transaction():
            self._gateway.append(spec.table, record_row(spec, event))

            changes = balance_changes(event)
            if not changes:
                return 0

            current: dict[str, int] = {}
            for change in changes:
                if change.address not in current:
                    holder = self._gateway.get_balance(change.address)
                    current[change.address] = 0 if holder is None else holder.balance

            new_balances = apply_changes(current, event)
            ts = event_time(event)
            for address, balance in new_balances.items():
                self._gateway.upsert_balance(address, balance, ts)
            return len(new_balances)
