import pytest

from conftest import PACKAGE_ID
from suind.core.config import ConfigError
from suind.core.models import Purchase, Transfer
from suind.decoding.registries import LAUNCHPAD_EVENTS, make_launchpad_registry
from suind.decoding.registry import EventRegistryProvider, add_event_spec, lookup
from suind.decoding.registry_builder import EventEntry, event_spec_from_signature, make_registry
from suind.decoding.specs import EventRegistry, EventSpec, FieldSpec, UnknownEventType


def test_make_launchpad_registry(registry: EventRegistry) -> None:
    assert len(registry) == len(LAUNCHPAD_EVENTS) == 12
    assert all(key.startswith(f"{PACKAGE_ID}::launchpad::") for key in registry)
    assert sorted(spec.table for spec in registry.values()) == sorted(
        [
            "token_purchases",
            "token_sales",
            "token_transfers",
            "price_updates",
            "liquidity_deployments",
            "pool_pauses",
            "pool_unpauses",
            "launchpads",
            "vesting_claims",
            "fee_updates",
            "admin_transfers",
            "balance_updates",
        ]
    )


def test_short_package_id_is_padded() -> None:
    reg = make_launchpad_registry("0x2")
    assert f"0x{'0' * 63}2::launchpad::TokensPurchased" in reg


def test_malformed_package_id() -> None:
    with pytest.raises(ConfigError):
        make_launchpad_registry("not-hex")


def test_lookup_is_exact(registry: EventRegistry) -> None:
    key = f"{PACKAGE_ID}::launchpad::TokensPurchased"
    assert lookup(registry, key).variant is Purchase

    with pytest.raises(UnknownEventType):
        lookup(registry, f"{PACKAGE_ID}::launchpad::tokenspurchased")
    with pytest.raises(UnknownEventType):
        lookup(registry, f"{PACKAGE_ID}::other::TokensPurchased")


def test_transfer_columns_keep_onchain_names(registry: EventRegistry) -> None:
    spec = registry[f"{PACKAGE_ID}::launchpad::TokensTransferred"]
    assert spec.variant is Transfer
    assert [f.name for f in spec.fields] == ["sender", "recipient", "amount", "timestamp"]
    assert spec.columns() == ["from", "to", "amount", "timestamp"]


def test_signature_parsing_with_generics() -> None:
    spec = event_spec_from_signature(
        "TokensPurchased(address buyer, u64 amount, u64 timestamp)",
        package_id=PACKAGE_ID,
        module="launchpad",
        table="t",
        variant=Purchase,
    )
    assert [(f.name, f.type) for f in spec.fields] == [("buyer", "address"), ("amount", "u64"), ("timestamp", "u64")]


def test_spec_rejects_field_mismatch() -> None:
    with pytest.raises(ValueError, match="do not match"):
        EventSpec(
            event_type="x",
            name="Bad",
            fields=(FieldSpec("buyer", "address"),),
            table="t",
            variant=Purchase,
        )


def test_spec_rejects_unsupported_type() -> None:
    with pytest.raises(ValueError, match="unsupported"):
        EventSpec(
            event_type="x",
            name="Bad",
            fields=(FieldSpec("buyer", "vector<address>"), FieldSpec("amount", "u64"), FieldSpec("timestamp", "u64")),
            table="t",
            variant=Purchase,
        )


def test_duplicate_entries_rejected() -> None:
    entry = EventEntry("TokensPurchased(address buyer, u64 amount, u64 timestamp)", "token_purchases", Purchase)
    with pytest.raises(ValueError, match="Duplicate"):
        make_registry([entry, entry], package_id=PACKAGE_ID, module="launchpad")


def test_adding_an_event_kind_is_a_data_change(registry: EventRegistry) -> None:
    spec = event_spec_from_signature(
        "BuyTokens(address buyer, u64 amount, u64 timestamp)",
        package_id=PACKAGE_ID,
        module="launchpad",
        table="token_purchases",
        variant=Purchase,
    )
    add_event_spec(registry, spec)
    assert lookup(registry, spec.event_type) is spec
    assert EventRegistryProvider(registry).get_registry() is registry
