"""Balance ledger: pure rules mapping (balance, event) to a new balance.

- Purchase credits the buyer.
- Sale debits the seller, saturating at zero.
- Transfer debits the sender (saturating) then credits the recipient.
- Every other event kind leaves balances untouched.

The saturating debit hides debits that exceed the tracked balance (e.g. when
indexing started mid-history). Derived balances are therefore a floor-at-zero
approximation, not an audited ledger.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from suind.core.models import DecodedEvent, Purchase, Sale, Transfer

U64_MAX = 2**64 - 1

Direction = Literal["credit", "debit"]


class LedgerOverflowError(OverflowError):
    """A credit would push a balance past the u64 range."""


@dataclass(slots=True, frozen=True)
class BalanceChange:
    """One per-address effect of an event."""

    address: str
    direction: Direction
    amount: int


def credit(current: int, amount: int) -> int:
    result = current + amount
    if result > U64_MAX:
        raise LedgerOverflowError(f"balance {current} + {amount} exceeds u64")
    return result


def debit(current: int, amount: int) -> int:
    return max(0, current - amount)


def balance_changes(event: DecodedEvent) -> list[BalanceChange]:
    """Describe how `event` affects holder balances, in application order."""
    match event:
        case Purchase():
            return [BalanceChange(event.buyer, "credit", event.amount)]
        case Sale():
            return [BalanceChange(event.seller, "debit", event.amount)]
        case Transfer():
            return [
                BalanceChange(event.sender, "debit", event.amount),
                BalanceChange(event.recipient, "credit", event.amount),
            ]
        case _:
            return []


def apply_change(current: int, change: BalanceChange) -> int:
    if change.direction == "credit":
        return credit(current, change.amount)
    return debit(current, change.amount)


def apply(current: int, event: DecodedEvent) -> int:
    """Apply `event` to a single balance.

    Only meaningful for single-address events (Purchase, Sale); for a
    Transfer use `apply_changes`, which keeps sender and recipient apart.
    """
    if isinstance(event, Transfer):
        raise ValueError("Transfer affects two addresses; use apply_changes()")
    for change in balance_changes(event):
        current = apply_change(current, change)
    return current


def apply_changes(balances: Mapping[str, int], event: DecodedEvent) -> dict[str, int]:
    """Fold the changes of `event` over `balances` (missing address = 0).

    Returns only the addresses touched by the event, with their new values.
    """
    updated: dict[str, int] = {}
    for change in balance_changes(event):
        current = updated.get(change.address, balances.get(change.address, 0))
        updated[change.address] = apply_change(current, change)
    return updated
