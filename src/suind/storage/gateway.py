"""DuckDB-backed persistence gateway.

The gateway owns a single long-lived DuckDB connection, acquired in the
constructor and released by `close()` (or on leaving the `with` block). It
implements write semantics only:

- `append` always inserts a new row (no existence check, no dedup).
- `upsert_balance` replaces the holder row keyed by wallet address.
- `transaction()` groups the writes of one event and rolls back on error.

It also serves the two read queries used by external consumers: a holder's
balance and a wallet's transaction history.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import duckdb
import pandas as pd

from suind.core.interfaces import IPersistenceGateway, PersistenceError
from suind.core.models import HolderBalance
from suind.decoding.specs import EventRegistry

from . import sql_queries

logger = logging.getLogger(__name__)


def _to_naive_utc(ts: datetime | None) -> datetime | None:
    if ts is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


class DuckDBGateway(IPersistenceGateway):
    """Persistence gateway over one DuckDB database.

    Parameters
    ----------
    path : str | Path
        Database file, or ":memory:" for an in-process store.
    read_only : bool
        Open without write access (query-only consumers such as the CLI).
    """

    def __init__(self, path: str | Path = ":memory:", *, read_only: bool = False) -> None:
        self.path = str(path)
        try:
            self.con = duckdb.connect(self.path, read_only=read_only)
        except duckdb.Error as e:
            raise PersistenceError(f"cannot open store {self.path}: {e}") from e
        self._in_transaction = False

    # ---------- lifecycle ----------

    def close(self) -> None:
        self.con.close()

    def __enter__(self) -> DuckDBGateway:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---------- schema ----------

    def provision_schema(self, registry: EventRegistry) -> None:
        """Create the record tables for `registry` and the holders table.

        Idempotent: existing tables and the sequence are left untouched.
        """
        statements = [sql_queries.CREATE_SEQUENCE, sql_queries.CREATE_HOLDERS_TABLE]
        tables_seen: set[str] = set()
        for spec in registry.values():
            if spec.table in tables_seen:
                continue
            tables_seen.add(spec.table)
            statements.append(sql_queries.create_record_table(spec))
        try:
            for stmt in statements:
                self.con.execute(stmt)
        except duckdb.Error as e:
            raise PersistenceError(f"schema provisioning failed: {e}") from e
        logger.info("Schema ready: %d record tables + holders", len(tables_seen))

    def list_tables(self) -> list[str]:
        rows = self.con.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main' ORDER BY table_name"
        ).fetchall()
        return [r[0] for r in rows]

    # ---------- writes ----------

    @contextmanager
    def transaction(self) -> Iterator[DuckDBGateway]:
        """Run the enclosed writes atomically; nested use joins the outer one."""
        if self._in_transaction:
            yield self
            return
        try:
            self.con.begin()
        except duckdb.Error as e:
            raise PersistenceError(f"cannot begin transaction: {e}") from e
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self._in_transaction = False
            try:
                self.con.rollback()
            except duckdb.Error as e:
                logger.error("Rollback failed: %s", e)
            raise
        self._in_transaction = False
        try:
            self.con.commit()
        except duckdb.Error as e:
            raise PersistenceError(f"commit failed: {e}") from e

    def append(self, table: str, row: dict[str, Any]) -> None:
        """Insert `row` into `table` unconditionally."""
        columns = list(row.keys())
        try:
            self.con.execute(sql_queries.insert_record(table, columns), [row[c] for c in columns])
        except duckdb.Error as e:
            raise PersistenceError(f"append to {table} failed: {e}") from e

    def upsert_balance(self, address: str, balance: int, timestamp: datetime | None) -> None:
        """Create or replace the holder row for `address` (last write wins)."""
        try:
            self.con.execute(sql_queries.UPSERT_BALANCE, [address, balance, _to_naive_utc(timestamp)])
        except duckdb.Error as e:
            raise PersistenceError(f"balance upsert for {address} failed: {e}") from e

    # ---------- reads ----------

    def get_balance(self, address: str) -> HolderBalance | None:
        try:
            row = self.con.execute(sql_queries.SELECT_BALANCE, [address]).fetchone()
        except duckdb.Error as e:
            raise PersistenceError(f"balance lookup for {address} failed: {e}") from e
        if row is None:
            return None
        wallet, balance, last_updated = row
        if last_updated is not None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        return HolderBalance(wallet_address=wallet, balance=int(balance), last_updated=last_updated)

    def get_holder_balance(self, address: str) -> int | None:
        """Return the balance of `address`, or None if it was never referenced."""
        holder = self.get_balance(address)
        return None if holder is None else holder.balance

    def get_transactions(self, address: str) -> pd.DataFrame:
        """Fetch the purchases, sales and transfer legs of `address`, newest first.

        Returns:
            DataFrame with columns transaction_type, amount, ts, tx_digest.
        """
        try:
            return self.con.execute(sql_queries.FETCH_TRANSACTIONS_QUERY, [address] * 4).df()
        except duckdb.Error as e:
            raise PersistenceError(f"transaction history for {address} failed: {e}") from e

    def count_rows(self, table: str) -> int:
        (n,) = self.con.execute(f"SELECT count(*) FROM {sql_queries.quote_ident(table)}").fetchone()
        return int(n)

    def fetch_rows(self, table: str) -> pd.DataFrame:
        """All rows of `table` in insertion order."""
        return self.con.execute(f"SELECT * FROM {sql_queries.quote_ident(table)} ORDER BY seq").df()
