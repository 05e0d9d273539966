"""Event registries for the launchpad Move module.

Each entry pairs a Move event signature with its target table and decoded
variant. Adding an event kind only requires a new `EventEntry` here.

Example
-------
>>> from suind.decoding.registries import make_launchpad_registry
>>> reg = make_launchpad_registry("0x" + "ab" * 32)
"""

from __future__ import annotations

from suind.core.config import DEFAULT_MODULE, normalize_package_id
from suind.core.models import (
    AdminTransfer,
    BalanceSnapshot,
    FeeUpdate,
    LaunchpadCreated,
    LiquidityDeployment,
    PoolPaused,
    PoolUnpaused,
    PriceUpdate,
    Purchase,
    Sale,
    Transfer,
    VestingClaim,
)

from .registry_builder import EventEntry, make_registry
from .specs import EventRegistry

LAUNCHPAD_EVENTS: list[EventEntry] = [
    EventEntry("TokensPurchased(address buyer, u64 amount, u64 timestamp)", "token_purchases", Purchase),
    EventEntry("TokensSold(address seller, u64 amount, u64 timestamp)", "token_sales", Sale),
    EventEntry(
        "TokensTransferred(address from, address to, u64 amount, u64 timestamp)",
        "token_transfers",
        Transfer,
        rename={"from": "sender", "to": "recipient"},
    ),
    EventEntry("PriceUpdate(u64 new_price, u64 tokens_sold, u64 timestamp)", "price_updates", PriceUpdate),
    EventEntry(
        "LiquidityDeployed(ID launchpad_id, u64 sui_amount, u64 timestamp)",
        "liquidity_deployments",
        LiquidityDeployment,
    ),
    EventEntry("PoolPaused(ID launchpad_id, u64 timestamp)", "pool_pauses", PoolPaused),
    EventEntry("PoolUnpaused(ID launchpad_id, u64 timestamp)", "pool_unpauses", PoolUnpaused),
    EventEntry(
        "LaunchpadCreated(ID launchpad_id, address creator, String name, String description, "
        "u64 token_supply, u64 initial_price, u64 price_increment, String website_url, u64 timestamp)",
        "launchpads",
        LaunchpadCreated,
    ),
    EventEntry("VestingClaimed(address user, u64 amount, u64 timestamp)", "vesting_claims", VestingClaim),
    EventEntry("FeeUpdated(u64 previous_fee, u64 new_fee)", "fee_updates", FeeUpdate),
    EventEntry("AdminTransferred(address previous_admin, address new_admin)", "admin_transfers", AdminTransfer),
    EventEntry(
        "BalanceUpdate(ID launchpad_id, address holder, u64 balance, u64 timestamp)",
        "balance_updates",
        BalanceSnapshot,
    ),
]


def make_launchpad_registry(package_id: str, module: str = DEFAULT_MODULE) -> EventRegistry:
    """Return the registry for all launchpad events emitted by `package_id::module`."""
    return make_registry(LAUNCHPAD_EVENTS, package_id=normalize_package_id(package_id), module=module)
