"""Registry access helpers.

This module exposes:
- `lookup(registry, event_type)` → EventSpec or `UnknownEventType`
- `add_event_spec(registry, spec)` → insert one spec
- `add_many(registry, specs)` → insert multiple
- `EventRegistryProvider` → the bridge used by the dispatcher

Matching is exact string equality on the fully-qualified event type.
"""

from __future__ import annotations

from collections.abc import Iterable

from suind.core.interfaces import IEventRegistryProvider
from suind.decoding.specs import EventRegistry, EventSpec, UnknownEventType


def lookup(registry: EventRegistry, event_type: str) -> EventSpec:
    """Return the spec registered for `event_type` (case-sensitive, exact match)."""
    spec = registry.get(event_type)
    if spec is None:
        raise UnknownEventType(event_type)
    return spec


def add_event_spec(registry: EventRegistry, spec: EventSpec) -> None:
    """Insert one spec into the registry keyed by its event type."""
    registry[spec.event_type] = spec


def add_many(registry: EventRegistry, specs: Iterable[EventSpec]) -> None:
    """Insert many specs into the registry."""
    for s in specs:
        add_event_spec(registry, s)


class EventRegistryProvider(IEventRegistryProvider):
    """
    Simple registry provider that always returns the same EventRegistry.

    This is used as the bridge between the decoding registry (signatures/specs)
    and the dispatcher which only depends on the interface.
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    def get_registry(self) -> EventRegistry:
        return self._registry
