"""Event decoding driven by a static registry.

This package provides:
- Event specification system (EventSpec, FieldSpec)
- BCS reader for canonical Move payloads
- Generic decoder that translates EventRecords into decoded event variants
- Registry management and the launchpad registry
"""

from suind.decoding.bcs import BcsReader, DecodeError
from suind.decoding.decoder import decode_event, decode_payload
from suind.decoding.registries import LAUNCHPAD_EVENTS, make_launchpad_registry
from suind.decoding.registry import EventRegistryProvider, add_event_spec, add_many, lookup
from suind.decoding.registry_builder import EventEntry, event_type_id, make_registry
from suind.decoding.specs import EventRegistry, EventSpec, FieldSpec, UnknownEventType

__all__ = [
    "BcsReader",
    "DecodeError",
    "decode_event",
    "decode_payload",
    "LAUNCHPAD_EVENTS",
    "make_launchpad_registry",
    "EventRegistryProvider",
    "add_event_spec",
    "add_many",
    "lookup",
    "EventEntry",
    "event_type_id",
    "make_registry",
    "EventRegistry",
    "EventSpec",
    "FieldSpec",
    "UnknownEventType",
]
