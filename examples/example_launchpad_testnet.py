import asyncio
from pathlib import Path

import duckdb

from suind.core.config import IndexerConfig
from suind.log import setup_logging
from suind.orchestration.indexer import run_indexer

EXAMPLES_ROOT = Path(__file__).parent
assert EXAMPLES_ROOT.name == "examples"
OUT_ROOT = EXAMPLES_ROOT.parent / "data_examples"
OUT_ROOT.mkdir(exist_ok=True)

config = IndexerConfig(
    rpc_url="https://fullnode.testnet.sui.io:443",
    package_id="0x2",  # replace with the launchpad package id
    db_path=OUT_ROOT / "launchpad.duckdb",
    log_file=OUT_ROOT / "indexer.log",
    page_size=50,
)


async def index_for(seconds: float):
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(seconds, stop.set)
    return await run_indexer(config, stop_event=stop)


async def main():
    setup_logging(config.log_level, config.log_file)
    result = await index_for(60)
    print(result.engine.mode, result.dispatch.as_dict())

    con = duckdb.connect(str(config.db_path), read_only=True)
    q = """
    SELECT wallet_address, balance, last_updated
    FROM holders
    ORDER BY balance DESC
    LIMIT 10
    """
    print(con.execute(q).df())


if __name__ == "__main__":
    asyncio.run(main())
