from datetime import datetime, timezone

import pytest

from conftest import W1, W2
from suind.core.interfaces import PersistenceError
from suind.decoding.specs import EventRegistry
from suind.storage.gateway import DuckDBGateway


def purchase_row(buyer: str, amount: int, *, ts: int = 1, emitted_at: int | None = None, tx: str = "tx") -> dict:
    return {"buyer": buyer, "amount": amount, "timestamp": ts, "emitted_at": emitted_at, "tx_digest": tx}


def test_provision_is_idempotent(registry: EventRegistry, gateway: DuckDBGateway) -> None:
    before = gateway.list_tables()
    gateway.provision_schema(registry)
    gateway.provision_schema(registry)
    after = gateway.list_tables()

    assert before == after
    assert len(after) == 13  # 12 record tables + holders
    assert "holders" in after


def test_append_is_not_deduplicated(gateway: DuckDBGateway) -> None:
    row = purchase_row(W1, 10)
    gateway.append("token_purchases", row)
    gateway.append("token_purchases", row)

    assert gateway.count_rows("token_purchases") == 2
    df = gateway.fetch_rows("token_purchases")
    assert df["seq"].is_monotonic_increasing


def test_append_to_missing_table(gateway: DuckDBGateway) -> None:
    with pytest.raises(PersistenceError, match="nope"):
        gateway.append("nope", {"a": 1})


def test_upsert_balance_last_write_wins(gateway: DuckDBGateway) -> None:
    t1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    t2 = datetime(2024, 1, 2, tzinfo=timezone.utc)
    gateway.upsert_balance(W1, 100, t1)
    gateway.upsert_balance(W1, 60, t2)

    holder = gateway.get_balance(W1)
    assert holder is not None
    assert holder.balance == 60
    assert holder.last_updated == t2
    assert gateway.count_rows("holders") == 1


def test_unknown_holder(gateway: DuckDBGateway) -> None:
    assert gateway.get_balance(W2) is None
    assert gateway.get_holder_balance(W2) is None


def test_transaction_rolls_back(gateway: DuckDBGateway) -> None:
    with pytest.raises(PersistenceError):
        with gateway.transaction():
            gateway.append("token_purchases", purchase_row(W1, 10))
            gateway.append("missing_table", {"x": 1})

    assert gateway.count_rows("token_purchases") == 0


def test_get_transactions_newest_first(gateway: DuckDBGateway) -> None:
    gateway.append("token_purchases", purchase_row(W1, 100, emitted_at=1_000, tx="a"))
    gateway.append(
        "token_transfers",
        {"from": W1, "to": W2, "amount": 40, "timestamp": 2, "emitted_at": 2_000, "tx_digest": "b"},
    )
    gateway.append(
        "token_sales",
        {"seller": W1, "amount": 7, "timestamp": 3, "emitted_at": 3_000, "tx_digest": "c"},
    )

    df = gateway.get_transactions(W1)
    assert list(df["transaction_type"]) == ["sale", "transfer_out", "purchase"]
    assert list(df["tx_digest"]) == ["c", "b", "a"]

    df2 = gateway.get_transactions(W2)
    assert list(df2["transaction_type"]) == ["transfer_in"]
    assert int(df2["amount"].iloc[0]) == 40


def test_read_only_missing_file(tmp_path) -> None:
    with pytest.raises(PersistenceError):
        DuckDBGateway(tmp_path / "absent.duckdb", read_only=True)


def test_file_store_persists(tmp_path, registry: EventRegistry) -> None:
    path = tmp_path / "idx.duckdb"
    with DuckDBGateway(path) as gw:
        gw.provision_schema(registry)
        gw.upsert_balance(W1, 5, None)

    with DuckDBGateway(path, read_only=True) as gw:
        assert gw.get_holder_balance(W1) == 5
