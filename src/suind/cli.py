import asyncio
import signal
from datetime import datetime, timezone
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from suind.core.config import DEFAULT_MODULE, ConfigError, IndexerConfig, normalize_address
from suind.core.interfaces import PersistenceError
from suind.log import setup_logging

console = Console()


def _format_ts(ms) -> str:
    if ms is None or ms != ms:  # NaN from pandas
        return "-"
    return datetime.fromtimestamp(int(ms) / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _wallet(raw: str) -> str:
    try:
        return normalize_address(raw)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="WALLET") from e


def _load_config(**overrides) -> IndexerConfig:
    try:
        return IndexerConfig.from_env(**overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SUIND_DB_PATH",
    default="indexer.duckdb",
    show_default=True,
    help="DuckDB database file",
)


@click.group()
def cli() -> None:
    """suind: Sui launchpad event indexer."""
    load_dotenv()


@cli.command("run")
@click.option("--rpc", "rpc_url", default=None, help="Sui JSON-RPC endpoint (env SUI_RPC_URL)")
@click.option("--ws", "ws_url", default=None, help="Websocket endpoint (env SUI_WS_URL; default derived from --rpc)")
@click.option("--package-id", default=None, help="Launchpad package id (env PACKAGE_ID)")
@click.option("--module", default=None, help="Move module name [default: launchpad]")
@click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="DuckDB database file")
@click.option("--poll-interval-ms", type=int, default=None, help="Sleep between polls in polling mode")
@click.option("--page-size", type=int, default=None, help="Events per poll request")
@click.option("--log-level", default=None, help="Log level (env SUIND_LOG_LEVEL)")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Log file (env SUIND_LOG_FILE)")
def run_cmd(**options) -> None:
    """Provision the store and index launchpad events until interrupted."""
    config = _load_config(**options)
    setup_logging(config.log_level, config.log_file, console=console)

    from suind.orchestration.indexer import run_indexer

    async def main():
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except (NotImplementedError, RuntimeError):
                pass  # not supported on this platform; Ctrl+C cancels the task instead
        return await run_indexer(config, stop_event=stop)

    try:
        out = asyncio.run(main())
    except PersistenceError as e:
        raise click.ClickException(f"store error: {e}") from e
    except KeyboardInterrupt:
        console.print("[yellow]interrupted[/]")
        return

    console.print(
        f"[bold]stopped[/] ({out.engine.mode or 'no mode'}): "
        f"{out.engine.delivered} delivered • {out.dispatch.persisted} persisted • "
        f"{out.dispatch.unknown} unknown • {out.dispatch.decode_failed} undecodable • "
        f"{out.dispatch.persist_failed} store failures"
    )


@cli.command("init-db")
@click.option("--package-id", envvar="PACKAGE_ID", required=True, help="Launchpad package id (env PACKAGE_ID)")
@click.option("--module", default=DEFAULT_MODULE, show_default=True, help="Move module name")
@db_option
def init_db_cmd(package_id: str, module: str, db_path: Path) -> None:
    """Create the record tables and the holders table (idempotent)."""
    from suind.orchestration.indexer import provision_store

    try:
        tables = provision_store(db_path, package_id, module)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--package-id") from e
    except PersistenceError as e:
        raise click.ClickException(f"store error: {e}") from e
    console.print(f"[bold]{db_path}[/]: {', '.join(tables)}")


@cli.command("balance")
@click.argument("wallet")
@db_option
def balance_cmd(wallet: str, db_path: Path) -> None:
    """Print the tracked balance of WALLET."""
    from suind.storage.gateway import DuckDBGateway

    address = _wallet(wallet)
    try:
        with DuckDBGateway(db_path, read_only=True) as gateway:
            holder = gateway.get_balance(address)
    except PersistenceError as e:
        raise click.ClickException(f"store error: {e}") from e

    if holder is None:
        console.print(f"{address}: [dim]never seen[/]")
        return
    updated = holder.last_updated.strftime("%Y-%m-%d %H:%M:%S") if holder.last_updated else "-"
    console.print(f"{address}: [bold]{holder.balance:,}[/] (updated {updated} UTC)")


@cli.command("transactions")
@click.argument("wallet")
@db_option
@click.option("--limit", type=int, default=50, show_default=True, help="Rows to show (0 = all)")
def transactions_cmd(wallet: str, db_path: Path, limit: int) -> None:
    """Show WALLET's purchases, sales and transfers, newest first."""
    from suind.storage.gateway import DuckDBGateway

    address = _wallet(wallet)
    try:
        with DuckDBGateway(db_path, read_only=True) as gateway:
            df = gateway.get_transactions(address)
    except PersistenceError as e:
        raise click.ClickException(f"store error: {e}") from e

    if limit:
        df = df.head(limit)

    table = Table(title=f"Transactions of {address}")
    table.add_column("time (UTC)")
    table.add_column("type")
    table.add_column("amount", justify="right")
    table.add_column("tx digest", overflow="fold")
    for row in df.itertuples(index=False):
        table.add_row(_format_ts(row.ts), row.transaction_type, f"{int(row.amount):,}", row.tx_digest or "-")
    console.print(table)
    if df.empty:
        console.print("[dim]no transactions[/]")


if __name__ == "__main__":
    cli()
