"""Generic event decoder driven by the registry.

This module translates an `EventRecord` into one of the decoded launchpad
event variants using the `EventSpec` registered for its type. Decoding is a
pure structural parse: no I/O, no state.
"""

from __future__ import annotations

from typing import Any

from suind.core.models import DecodedEvent, EventRecord
from suind.decoding.bcs import BcsReader, DecodeError
from suind.decoding.specs import EventSpec


def decode_payload(spec: EventSpec, payload: bytes) -> dict[str, Any]:
    """Parse `payload` field by field according to `spec`.

    The whole payload must be consumed; short or over-long input raises
    `DecodeError`.
    """
    reader = BcsReader(payload)
    values: dict[str, Any] = {}
    try:
        for f in spec.fields:
            values[f.name] = reader.read(f.type)
        reader.expect_end()
    except DecodeError as e:
        raise DecodeError(f"{spec.name}: {e}") from e
    return values


def decode_event(spec: EventSpec, record: EventRecord) -> DecodedEvent:
    """Decode `record` into the variant registered by `spec`."""
    if record.event_type != spec.event_type:
        raise DecodeError(f"spec {spec.event_type} cannot decode {record.event_type}")
    values = decode_payload(spec, record.payload)
    return spec.variant(
        emitted_at=record.emitted_at,
        transaction_id=record.transaction_id,
        **values,
    )
