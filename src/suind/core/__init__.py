"""Core data models, configuration, ledger rules and use cases.

This package provides:
- Data models (EventRecord, EventCursor, EventPage, decoded events, HolderBalance)
- Configuration (IndexerConfig)
"""

from suind.core.config import ConfigError, IndexerConfig
from suind.core.models import (
    DecodedEvent,
    EventCursor,
    EventPage,
    EventRecord,
    HolderBalance,
)

__all__ = [
    "ConfigError",
    "IndexerConfig",
    "DecodedEvent",
    "EventCursor",
    "EventPage",
    "EventRecord",
    "HolderBalance",
]
