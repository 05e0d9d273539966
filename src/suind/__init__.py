from __future__ import annotations

from .core.config import IndexerConfig
from .core.models import DecodedEvent, EventRecord, HolderBalance
from .decoding.registries import LAUNCHPAD_EVENTS, make_launchpad_registry
from .decoding.registry import add_event_spec, add_many, lookup
from .decoding.specs import EventRegistry, EventSpec, FieldSpec

__all__ = [
    "IndexerConfig",
    "DecodedEvent",
    "EventRecord",
    "HolderBalance",
    "LAUNCHPAD_EVENTS",
    "make_launchpad_registry",
    "add_event_spec",
    "add_many",
    "lookup",
    "EventRegistry",
    "EventSpec",
    "FieldSpec",
]
