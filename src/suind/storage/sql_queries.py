"""
sql_queries.py
--------------

Centralized SQL for the DuckDB store.

DDL is generated per registry table from the EventSpec field types; the
statements are all `IF NOT EXISTS` so provisioning can run on every start.
"""

from __future__ import annotations

from suind.decoding.specs import EventSpec

# =====================================================================
# TYPE MAPPING
# =====================================================================

MOVE_TO_DUCKDB: dict[str, str] = {
    "address": "VARCHAR",
    "ID": "VARCHAR",
    "bool": "BOOLEAN",
    "u8": "UTINYINT",
    "u16": "USMALLINT",
    "u32": "UINTEGER",
    "u64": "UBIGINT",
    "u128": "UHUGEINT",
    "u256": "VARCHAR",  # exceeds every native integer type
    "string": "VARCHAR",
    "String": "VARCHAR",
    "vector<u8>": "VARCHAR",
}

# Columns appended to every record table after the payload fields
RECORD_SEQUENCE = "record_seq"
ENVELOPE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("emitted_at", "BIGINT"),
    ("tx_digest", "VARCHAR"),
)


def quote_ident(name: str) -> str:
    """Quote an identifier ("from", "to", "timestamp" are reserved words)."""
    return '"' + name.replace('"', '""') + '"'


# =====================================================================
# SCHEMA PROVISIONING
# =====================================================================

CREATE_SEQUENCE = f"CREATE SEQUENCE IF NOT EXISTS {RECORD_SEQUENCE};"

CREATE_HOLDERS_TABLE = """
CREATE TABLE IF NOT EXISTS holders (
  wallet_address VARCHAR PRIMARY KEY,
  balance        UBIGINT NOT NULL,
  last_updated   TIMESTAMP
);
"""


def create_record_table(spec: EventSpec) -> str:
    """DDL for the append-only table of one event kind."""
    cols = [f"{quote_ident('seq')} BIGINT DEFAULT nextval('{RECORD_SEQUENCE}')"]
    cols += [f"{quote_ident(f.column_name)} {MOVE_TO_DUCKDB[f.type]}" for f in spec.fields]
    cols += [f"{quote_ident(name)} {typ}" for name, typ in ENVELOPE_COLUMNS]
    body = ",\n  ".join(cols)
    return f"CREATE TABLE IF NOT EXISTS {quote_ident(spec.table)} (\n  {body}\n);"


def insert_record(table: str, columns: list[str]) -> str:
    cols = ", ".join(quote_ident(c) for c in columns)
    marks = ", ".join("?" for _ in columns)
    return f"INSERT INTO {quote_ident(table)} ({cols}) VALUES ({marks});"


# =====================================================================
# HOLDER BALANCE QUERIES
# =====================================================================

UPSERT_BALANCE = """
INSERT INTO holders (wallet_address, balance, last_updated)
VALUES (?, ?, ?)
ON CONFLICT (wallet_address) DO UPDATE
SET balance = excluded.balance,
    last_updated = excluded.last_updated;
"""

SELECT_BALANCE = """
SELECT wallet_address, balance, last_updated
FROM holders
WHERE wallet_address = ?;
"""


# =====================================================================
# WALLET TRANSACTION HISTORY
# =====================================================================

# One row per purchase / sale / transfer leg involving the wallet,
# newest first; insertion order breaks ties.
FETCH_TRANSACTIONS_QUERY = """
WITH legs AS (
  SELECT 'purchase' AS transaction_type, amount, "timestamp", emitted_at, tx_digest, seq
  FROM token_purchases WHERE buyer = ?
  UNION ALL
  SELECT 'sale' AS transaction_type, amount, "timestamp", emitted_at, tx_digest, seq
  FROM token_sales WHERE seller = ?
  UNION ALL
  SELECT 'transfer_out' AS transaction_type, amount, "timestamp", emitted_at, tx_digest, seq
  FROM token_transfers WHERE "from" = ?
  UNION ALL
  SELECT 'transfer_in' AS transaction_type, amount, "timestamp", emitted_at, tx_digest, seq
  FROM token_transfers WHERE "to" = ?
)
SELECT transaction_type, amount, COALESCE(emitted_at, "timestamp") AS ts, tx_digest
FROM legs
ORDER BY ts DESC, seq DESC;
"""
