"""Indexer orchestration: source → engine → dispatcher → store.

This module provides two layers:

1) `run_ingestion(...)`:
   - Pure application-layer wiring of the ingestion engine and dispatcher.
   - Depends ONLY on interfaces (IEventSource, IEventRegistryProvider,
     IPersistenceGateway).
   - Does NOT manage lifecycle (closing the source or the store).

2) `run_indexer(...)` / `provision_store(...)` (convenience wrappers):
   - Wire concrete implementations (SuiEventSource, DuckDBGateway) from an
     `IndexerConfig` for CLI usage and own their lifecycle.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from suind.clients.sui import SuiEventSource
from suind.core.config import DEFAULT_MODULE, IndexerConfig
from suind.core.interfaces import IEventRegistryProvider, IEventSource, IPersistenceGateway
from suind.core.models import DispatchStats, EngineStats
from suind.core.use_cases.dispatch import Dispatcher
from suind.core.use_cases.ingest import EngineState, IngestionEngine
from suind.decoding.registries import make_launchpad_registry
from suind.decoding.registry import EventRegistryProvider
from suind.storage.gateway import DuckDBGateway

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexerOutput:
    """Final state and counters of one indexer run."""

    state: EngineState
    engine: EngineStats
    dispatch: DispatchStats


# ---------------------------------------------------------------------------
# 1) Pure application use case
# ---------------------------------------------------------------------------


async def run_ingestion(
    *,
    source: IEventSource,
    registry_provider: IEventRegistryProvider,
    gateway: IPersistenceGateway,
    package_id: str,
    module: str,
    poll_interval_ms: int,
    page_size: int | None = None,
    stop_event: asyncio.Event | None = None,
) -> IndexerOutput:
    dispatcher = Dispatcher(registry_provider, gateway)
    engine = IngestionEngine(
        source,
        dispatcher,
        package_id=package_id,
        module=module,
        poll_interval_ms=poll_interval_ms,
        page_size=page_size,
        stop_event=stop_event,
    )
    try:
        await engine.run()
    finally:
        logger.info(
            "Engine %s (mode=%s): %d delivered, %s",
            engine.state.value,
            engine.stats.mode,
            engine.stats.delivered,
            dispatcher.stats.as_dict(),
        )
    return IndexerOutput(state=engine.state, engine=engine.stats, dispatch=dispatcher.stats)


# ---------------------------------------------------------------------------
# 2) Concrete wiring
# ---------------------------------------------------------------------------


def registry_provider_for(package_id: str, module: str = DEFAULT_MODULE) -> EventRegistryProvider:
    return EventRegistryProvider(make_launchpad_registry(package_id, module))


def provision_store(db_path: str | Path, package_id: str, module: str = DEFAULT_MODULE) -> list[str]:
    """Create (or verify) every table of the store; returns the table names."""
    registry = registry_provider_for(package_id, module).get_registry()
    with DuckDBGateway(db_path) as gateway:
        gateway.provision_schema(registry)
        return gateway.list_tables()


async def run_indexer(
    config: IndexerConfig,
    *,
    stop_event: asyncio.Event | None = None,
    source: IEventSource | None = None,
) -> IndexerOutput:
    """Open the store, provision it, then ingest until terminated.

    Store errors raised here (open, provisioning) are start-up failures and
    propagate to the caller.
    """
    registry_provider = registry_provider_for(config.package_id, config.module)

    with DuckDBGateway(config.db_path) as gateway:
        gateway.provision_schema(registry_provider.get_registry())

        owned = source is None
        if source is None:
            source = SuiEventSource(
                config.rpc_url,
                ws_url=config.resolved_ws_url,
                timeout_s=config.timeout_s,
            )
        logger.info(
            "Indexing %s::%s from %s into %s",
            config.package_id,
            config.module,
            config.rpc_url,
            config.db_path,
        )
        try:
            return await run_ingestion(
                source=source,
                registry_provider=registry_provider,
                gateway=gateway,
                package_id=config.package_id,
                module=config.module,
                poll_interval_ms=config.poll_interval_ms,
                page_size=config.page_size,
                stop_event=stop_event,
            )
        finally:
            if owned:
                await source.aclose()  # type: ignore[attr-defined]
