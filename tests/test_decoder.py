import pytest

from conftest import LAUNCHPAD, PACKAGE_ID, W1, W2, bcs_payload, spec_by_name
from suind.core.models import LaunchpadCreated, Purchase, Transfer
from suind.decoding.bcs import DecodeError
from suind.decoding.decoder import decode_event, decode_payload
from suind.decoding.specs import EventRegistry


def test_decode_purchase(registry: EventRegistry, make_record) -> None:
    spec = spec_by_name(registry, "TokensPurchased")
    record = make_record("TokensPurchased", tx="0xdigest", buyer=W1, amount=100, timestamp=1_700_000_000)

    event = decode_event(spec, record)

    assert isinstance(event, Purchase)
    assert event.buyer == W1
    assert event.amount == 100
    assert event.timestamp == 1_700_000_000
    assert event.transaction_id == "0xdigest"
    assert event.emitted_at == 1_700_000_000_000


def test_decode_transfer_uses_sender_recipient(registry: EventRegistry, make_record) -> None:
    spec = spec_by_name(registry, "TokensTransferred")
    record = make_record("TokensTransferred", sender=W1, recipient=W2, amount=40, timestamp=5)

    event = decode_event(spec, record)

    assert isinstance(event, Transfer)
    assert (event.sender, event.recipient, event.amount) == (W1, W2, 40)
    assert event.payload() == {"sender": W1, "recipient": W2, "amount": 40, "timestamp": 5}


def test_decode_launchpad_created_strings(registry: EventRegistry, make_record) -> None:
    spec = spec_by_name(registry, "LaunchpadCreated")
    record = make_record(
        "LaunchpadCreated",
        emitted_at=None,
        launchpad_id=LAUNCHPAD,
        creator=W1,
        name="Moon",
        description="",
        token_supply=10**9,
        initial_price=1,
        price_increment=2,
        website_url="https://moon.example",
        timestamp=9,
    )

    event = decode_event(spec, record)

    assert isinstance(event, LaunchpadCreated)
    assert event.name == "Moon"
    assert event.description == ""
    assert event.website_url == "https://moon.example"
    assert event.emitted_at is None


def test_short_payload_is_decode_error(registry: EventRegistry) -> None:
    spec = spec_by_name(registry, "TokensPurchased")
    payload = bcs_payload(spec, buyer=W1, amount=1, timestamp=2)[:-1]

    with pytest.raises(DecodeError, match="TokensPurchased"):
        decode_payload(spec, payload)


def test_long_payload_is_decode_error(registry: EventRegistry) -> None:
    spec = spec_by_name(registry, "PoolPaused")
    payload = bcs_payload(spec, launchpad_id=LAUNCHPAD, timestamp=2) + b"\x00"

    with pytest.raises(DecodeError, match="trailing"):
        decode_payload(spec, payload)


def test_spec_must_match_record_type(registry: EventRegistry, make_record) -> None:
    spec = spec_by_name(registry, "TokensSold")
    record = make_record("TokensPurchased", buyer=W1, amount=1, timestamp=2)

    with pytest.raises(DecodeError, match="cannot decode"):
        decode_event(spec, record)


def test_fee_update_has_no_timestamp(registry: EventRegistry, make_record) -> None:
    spec = spec_by_name(registry, "FeeUpdated")
    event = decode_event(spec, make_record("FeeUpdated", previous_fee=100, new_fee=250))
    assert event.payload() == {"previous_fee": 100, "new_fee": 250}
    assert spec.event_type == f"{PACKAGE_ID}::launchpad::FeeUpdated"
