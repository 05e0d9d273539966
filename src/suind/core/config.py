from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from eth_utils import is_hex, remove_0x_prefix

# Sui object ids are 32 bytes
PACKAGE_ID_HEX_LEN = 64
DEFAULT_MODULE = "launchpad"
DEFAULT_POLL_INTERVAL_MS = 1_000


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


def normalize_package_id(package_id: str) -> str:
    """Return the canonical `0x` + 64 hex digits form of a Sui package id.

    Short ids such as `0x2` are left-padded with zeros, the way Sui prints
    them in fully-qualified event type names.
    """
    raw = (package_id or "").strip()
    if not raw.lower().startswith("0x"):
        raise ConfigError(f"Malformed package id (expected 0x-prefixed hex): {package_id!r}")
    digits = remove_0x_prefix(raw).lower()
    if not digits or len(digits) > PACKAGE_ID_HEX_LEN or not is_hex(digits):
        raise ConfigError(f"Malformed package id: {package_id!r}")
    return "0x" + digits.zfill(PACKAGE_ID_HEX_LEN)


def normalize_address(address: str) -> str:
    """Canonical form of a Sui account address, as stored in the holders table."""
    try:
        return normalize_package_id(address)
    except ConfigError as e:
        raise ConfigError(f"Malformed address: {address!r}") from e


def _int_setting(env: Mapping[str, str], key: str, default: int | None) -> int | None:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class IndexerConfig:
    """Configuration for the launchpad indexer process."""

    rpc_url: str
    package_id: str
    module: str = DEFAULT_MODULE
    ws_url: str | None = None
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    page_size: int | None = None  # None -> source default
    db_path: Path = Path("indexer.duckdb")
    timeout_s: int = 20
    log_file: Path | None = Path("indexer.log")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigError("rpc_url is required")
        if not self.module:
            raise ConfigError("module is required")
        object.__setattr__(self, "package_id", normalize_package_id(self.package_id))
        if self.poll_interval_ms <= 0:
            raise ConfigError("poll_interval_ms must be positive")
        if self.page_size is not None and self.page_size <= 0:
            raise ConfigError("page_size must be positive")

    @property
    def resolved_ws_url(self) -> str | None:
        """Websocket endpoint: explicit `ws_url`, else derived from an https RPC URL."""
        if self.ws_url:
            return self.ws_url
        if self.rpc_url.startswith("https://"):
            return "wss://" + self.rpc_url[len("https://") :]
        # Plain HTTP endpoints get no push subscription
        return None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: object) -> IndexerConfig:
        """Build a config from environment variables; keyword overrides win.

        Required: SUI_RPC_URL, PACKAGE_ID.
        Optional: SUI_WS_URL, POLL_INTERVAL_MS, POLL_PAGE_SIZE, SUIND_DB_PATH,
        SUIND_LOG_FILE, SUIND_LOG_LEVEL, SUIND_TIMEOUT_S.
        """
        env = os.environ if env is None else env
        values: dict[str, object] = {
            "rpc_url": env.get("SUI_RPC_URL", ""),
            "package_id": env.get("PACKAGE_ID", ""),
            "ws_url": env.get("SUI_WS_URL") or None,
            "poll_interval_ms": _int_setting(env, "POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
            "page_size": _int_setting(env, "POLL_PAGE_SIZE", None),
            "db_path": Path(env.get("SUIND_DB_PATH") or "indexer.duckdb"),
            "timeout_s": _int_setting(env, "SUIND_TIMEOUT_S", 20),
            "log_file": Path(env.get("SUIND_LOG_FILE") or "indexer.log"),
            "log_level": (env.get("SUIND_LOG_LEVEL") or "INFO").upper(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values["rpc_url"]:
            raise ConfigError("SUI_RPC_URL must be set")
        if not values["package_id"]:
            raise ConfigError("PACKAGE_ID must be set")
        return cls(**values)  # type: ignore[arg-type]
