"""Event specification primitives and registry typing.

Defines lightweight dataclasses to describe how to decode events:
- `FieldSpec`: one BCS field (name + Move type), in declaration order
- `EventSpec`: one event rule (fully-qualified type, fields, target table, variant)
- `EventRegistry`: mapping from fully-qualified event type → EventSpec
"""

from __future__ import annotations

from dataclasses import dataclass

from suind.core.models import DECODED_EVENT_TYPES, payload_field_names

# Move types understood by the BCS reader
SUPPORTED_TYPES: frozenset[str] = frozenset(
    {
        "address",
        "ID",
        "bool",
        "u8",
        "u16",
        "u32",
        "u64",
        "u128",
        "u256",
        "string",
        "String",
        "vector<u8>",
    }
)


class UnknownEventType(KeyError):
    """Raised when an event type has no registry entry."""


@dataclass(frozen=True)
class FieldSpec:
    """Describe one BCS-encoded field of an event payload."""

    name: str
    type: str  # e.g., "address", "u64", "string"
    column: str | None = None  # store column name when it differs from `name`

    @property
    def column_name(self) -> str:
        return self.column or self.name


@dataclass(frozen=True)
class EventSpec:
    """One event decoding rule: where it comes from, how to parse it, where it goes."""

    event_type: str  # <package>::<module>::<EventName>
    name: str
    fields: tuple[FieldSpec, ...]
    table: str
    variant: type

    def __post_init__(self):
        if self.variant not in DECODED_EVENT_TYPES:
            raise ValueError(f"{self.name}: {self.variant!r} is not a decoded event variant")
        for f in self.fields:
            if f.type not in SUPPORTED_TYPES:
                raise ValueError(f"{self.name}.{f.name}: unsupported field type {f.type!r}")
        declared = [f.name for f in self.fields]
        expected = payload_field_names(self.variant)
        if declared != expected:
            raise ValueError(
                f"{self.name} fields {declared} do not match {self.variant.__name__} fields {expected}"
            )

    def columns(self) -> list[str]:
        """Store columns for the payload fields, in declaration order."""
        return [f.column_name for f in self.fields]


# The full registry keyed by fully-qualified event type.
EventRegistry = dict[str, EventSpec]
