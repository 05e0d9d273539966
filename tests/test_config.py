from pathlib import Path

import pytest

from suind.core.config import ConfigError, IndexerConfig, normalize_address, normalize_package_id

ENV = {"SUI_RPC_URL": "https://fullnode.example", "PACKAGE_ID": "0xABC"}


def test_from_env_defaults() -> None:
    cfg = IndexerConfig.from_env(ENV)

    assert cfg.package_id == "0x" + "0" * 61 + "abc"
    assert cfg.module == "launchpad"
    assert cfg.poll_interval_ms == 1000
    assert cfg.page_size is None
    assert cfg.db_path == Path("indexer.duckdb")
    assert cfg.log_file == Path("indexer.log")
    assert cfg.resolved_ws_url == "wss://fullnode.example"


def test_overrides_win() -> None:
    cfg = IndexerConfig.from_env(ENV | {"POLL_INTERVAL_MS": "500"}, poll_interval_ms=250, module=None)
    assert cfg.poll_interval_ms == 250
    assert cfg.module == "launchpad"


def test_plain_http_has_no_websocket() -> None:
    cfg = IndexerConfig.from_env(ENV | {"SUI_RPC_URL": "http://127.0.0.1:9000"})
    assert cfg.resolved_ws_url is None


def test_explicit_ws_url() -> None:
    cfg = IndexerConfig.from_env(ENV | {"SUI_WS_URL": "ws://127.0.0.1:9001"})
    assert cfg.resolved_ws_url == "ws://127.0.0.1:9001"


@pytest.mark.parametrize("missing", ["SUI_RPC_URL", "PACKAGE_ID"])
def test_missing_required(missing: str) -> None:
    env = {k: v for k, v in ENV.items() if k != missing}
    with pytest.raises(ConfigError, match=missing):
        IndexerConfig.from_env(env)


@pytest.mark.parametrize("value", ["abc", "1.5", "-1", "0"])
def test_bad_integers(value: str) -> None:
    with pytest.raises(ConfigError, match="POLL_INTERVAL_MS"):
        IndexerConfig.from_env(ENV | {"POLL_INTERVAL_MS": value})


@pytest.mark.parametrize("bad", ["abc", "0x", "0xZZ", "0x" + "1" * 65, ""])
def test_malformed_package_id(bad: str) -> None:
    with pytest.raises(ConfigError):
        normalize_package_id(bad)


def test_normalize_address() -> None:
    assert normalize_address("0x2") == "0x" + "0" * 63 + "2"
    with pytest.raises(ConfigError, match="address"):
        normalize_address("W1")
