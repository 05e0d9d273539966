"""Core data models for the launchpad event indexer.

This module defines:
- `EventRecord`: raw event as delivered by the source, minimally normalized.
- `EventCursor` / `EventPage`: pagination primitives for polling mode.
- The closed set of decoded launchpad events (`DecodedEvent`).
- `HolderBalance`: derived per-wallet running balance.

Design notes
------------
- Every decoded event carries the source-level `emitted_at` (ms since epoch,
  may be None) and `transaction_id` next to its own payload fields.
- Payload field names match the Move event field names, except for
  `TokensTransferred.from/to` which become `sender/recipient`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

# Fields every decoded event inherits from its EventRecord
ENVELOPE_FIELDS: tuple[str, ...] = ("emitted_at", "transaction_id")


# === Source records ===


@dataclass(slots=True, frozen=True)
class EventCursor:
    """Sui EventID used to resume `suix_queryEvents` pagination."""

    tx_digest: str
    event_seq: str

    def to_json(self) -> dict[str, str]:
        return {"txDigest": self.tx_digest, "eventSeq": self.event_seq}

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> EventCursor:
        return cls(tx_digest=str(raw["txDigest"]), event_seq=str(raw["eventSeq"]))


@dataclass(slots=True, frozen=True)
class EventRecord:
    """Raw event as delivered by the event source."""

    event_type: str  # <package>::<module>::<EventName>
    payload: bytes  # BCS-encoded event body
    transaction_id: str
    emitted_at: int | None = None  # ms since epoch
    sequence_cursor: EventCursor | None = None


@dataclass(slots=True, frozen=True)
class EventPage:
    """One page of events returned by a polling request."""

    data: list[EventRecord]
    next_cursor: EventCursor | None
    has_next_page: bool = False


# === Decoded launchpad events ===


@dataclass(frozen=True, kw_only=True)
class _Decoded:
    emitted_at: int | None
    transaction_id: str

    def payload(self) -> dict[str, Any]:
        """Return the payload fields (envelope excluded) in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in ENVELOPE_FIELDS}


@dataclass(frozen=True, kw_only=True)
class Purchase(_Decoded):
    buyer: str
    amount: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class Sale(_Decoded):
    seller: str
    amount: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class Transfer(_Decoded):
    sender: str
    recipient: str
    amount: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class PriceUpdate(_Decoded):
    new_price: int
    tokens_sold: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class LiquidityDeployment(_Decoded):
    launchpad_id: str
    sui_amount: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class PoolPaused(_Decoded):
    launchpad_id: str
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class PoolUnpaused(_Decoded):
    launchpad_id: str
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class LaunchpadCreated(_Decoded):
    launchpad_id: str
    creator: str
    name: str
    description: str
    token_supply: int
    initial_price: int
    price_increment: int
    website_url: str
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class VestingClaim(_Decoded):
    user: str
    amount: int
    timestamp: int


@dataclass(frozen=True, kw_only=True)
class FeeUpdate(_Decoded):
    previous_fee: int
    new_fee: int


@dataclass(frozen=True, kw_only=True)
class AdminTransfer(_Decoded):
    previous_admin: str
    new_admin: str


@dataclass(frozen=True, kw_only=True)
class BalanceSnapshot(_Decoded):
    launchpad_id: str
    holder: str
    balance: int
    timestamp: int


DecodedEvent = (
    Purchase
    | Sale
    | Transfer
    | PriceUpdate
    | LiquidityDeployment
    | PoolPaused
    | PoolUnpaused
    | LaunchpadCreated
    | VestingClaim
    | FeeUpdate
    | AdminTransfer
    | BalanceSnapshot
)

DECODED_EVENT_TYPES: tuple[type, ...] = DecodedEvent.__args__


def payload_field_names(variant: type) -> list[str]:
    """Names of the payload fields of a decoded-event class, in order."""
    return [f.name for f in fields(variant) if f.name not in ENVELOPE_FIELDS]


# === Derived state ===


@dataclass(slots=True, frozen=True)
class HolderBalance:
    """Current balance of one wallet."""

    wallet_address: str
    balance: int
    last_updated: datetime | None = None


@dataclass(slots=True)
class DispatchStats:
    """Per-outcome counters maintained by the dispatcher."""

    persisted: int = 0
    unknown: int = 0
    decode_failed: int = 0
    persist_failed: int = 0
    balances_updated: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "persisted": self.persisted,
            "unknown": self.unknown,
            "decode_failed": self.decode_failed,
            "persist_failed": self.persist_failed,
            "balances_updated": self.balances_updated,
        }


@dataclass(slots=True)
class EngineStats:
    """Counters maintained by the ingestion engine."""

    delivered: int = 0
    polls: int = 0
    poll_failures: int = 0
    mode: str | None = None
    history: list[str] = field(default_factory=list)
