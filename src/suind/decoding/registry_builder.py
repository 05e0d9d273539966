"""Registry builder utilities for creating event registries from signatures.

This module provides the core tools for building EventRegistry instances:
- Generic `make_registry()` function for one or many event entries
- Signature parsing helpers for converting Move event signatures to EventSpec
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from .specs import EventRegistry, EventSpec, FieldSpec


@dataclass(frozen=True)
class EventEntry:
    """Static description of one event kind: signature, target table, variant."""

    signature: str
    table: str
    variant: type
    rename: Mapping[str, str] = field(default_factory=dict)  # on-chain name -> python name


def event_type_id(package_id: str, module: str, name: str) -> str:
    """Return the fully-qualified event type `<package>::<module>::<name>`."""
    return f"{package_id}::{module}::{name}"


# ---- Helpers: build specs from event signature ----
def _split_params(params_str: str) -> list[str]:
    """Split the parameter list by commas while respecting generic types.

    Very lightweight splitter sufficient for typical event signatures.
    """
    items: list[str] = []
    depth = 0
    buf: list[str] = []
    for ch in params_str:
        if ch == '<':
            depth += 1
            buf.append(ch)
        elif ch == '>':
            depth -= 1
            buf.append(ch)
        elif ch == ',' and depth == 0:
            items.append(''.join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    if buf:
        items.append(''.join(buf).strip())
    # Handle empty list for no params
    return [i for i in items if i]


def _parse_param(p: str, fallback_name: str) -> tuple[str, str]:
    """Parse one parameter fragment into (name, move_type)."""
    tokens = ' '.join(p.strip().split()).split()
    if not tokens:
        raise ValueError(f"Empty parameter in signature ({fallback_name})")
    if len(tokens) == 1:
        # Unnamed parameter
        return (fallback_name, tokens[0])
    # Last token is the name, the rest is the type
    return (tokens[-1], ' '.join(tokens[:-1]))


def event_spec_from_signature(
    signature: str,
    *,
    package_id: str,
    module: str,
    table: str,
    variant: type,
    rename: Optional[Mapping[str, str]] = None,
) -> EventSpec:
    """Build an EventSpec from a Move-style event signature string.

    Example input:
      "TokensPurchased(address buyer, u64 amount, u64 timestamp)"
    """
    sig = signature.strip()
    open_paren = sig.find('(')
    close_paren = sig.rfind(')')
    if open_paren == -1 or close_paren == -1 or close_paren < open_paren:
        raise ValueError(f"Invalid event signature: {signature}")
    name = sig[:open_paren].strip()
    if not name:
        raise ValueError(f"Invalid event signature (missing name): {signature}")
    params_str = sig[open_paren + 1 : close_paren].strip()

    rename = rename or {}
    fields: list[FieldSpec] = []
    for i, part in enumerate(_split_params(params_str)):
        onchain_name, move_type = _parse_param(part, fallback_name=f"arg{i}")
        py_name = rename.get(onchain_name, onchain_name)
        column = onchain_name if py_name != onchain_name else None
        fields.append(FieldSpec(py_name, move_type, column))

    return EventSpec(
        event_type=event_type_id(package_id, module, name),
        name=name,
        fields=tuple(fields),
        table=table,
        variant=variant,
    )


def make_registry(
    entries: EventEntry | Sequence[EventEntry],
    *,
    package_id: str,
    module: str,
) -> EventRegistry:
    """Create a registry from one or multiple event entries.

    Args:
        entries: Single entry or list of entries
        package_id: Canonical package id the events are emitted from
        module: Move module name emitting the events

    Returns:
        EventRegistry keyed by fully-qualified event type
    """
    reg: EventRegistry = {}

    entry_list = [entries] if isinstance(entries, EventEntry) else entries

    for entry in entry_list:
        spec = event_spec_from_signature(
            entry.signature,
            package_id=package_id,
            module=module,
            table=entry.table,
            variant=entry.variant,
            rename=entry.rename,
        )
        if spec.event_type in reg:
            raise ValueError(f"Duplicate registry entry for {spec.event_type}")
        reg[spec.event_type] = spec

    return reg
