"""BCS decoding utilities: a sequential reader over canonical Move encodings.

BCS is not self-describing: field order and types come entirely from the
registered EventSpec. Integers are little-endian, sequences are prefixed by a
ULEB128 length, addresses and object ids are 32 raw bytes.
"""

from __future__ import annotations

from typing import Any

from eth_utils import encode_hex

ADDRESS_LEN = 32
_INT_WIDTHS: dict[str, int] = {"u8": 1, "u16": 2, "u32": 4, "u64": 8, "u128": 16, "u256": 32}
# ULEB128 lengths are bounded by u32 in BCS
_MAX_ULEB_BYTES = 5


class DecodeError(ValueError):
    """Raised when a payload does not match its registered shape."""


class BcsReader:
    """Cursor over a BCS byte string."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def take(self, n: int) -> bytes:
        if n > self.remaining:
            raise DecodeError(f"need {n} bytes at offset {self.pos}, only {self.remaining} left")
        out = self.data[self.pos : self.pos + n]
        self.pos += n
        return out

    def read_uleb128(self) -> int:
        value = 0
        for shift_i in range(_MAX_ULEB_BYTES):
            (byte,) = self.take(1)
            value |= (byte & 0x7F) << (7 * shift_i)
            if not byte & 0x80:
                return value
        raise DecodeError(f"ULEB128 length longer than {_MAX_ULEB_BYTES} bytes")

    def read_uint(self, typ: str) -> int:
        return int.from_bytes(self.take(_INT_WIDTHS[typ]), "little", signed=False)

    def read_bool(self) -> bool:
        (b,) = self.take(1)
        if b not in (0, 1):
            raise DecodeError(f"invalid bool byte {b:#x}")
        return b == 1

    def read_address(self) -> str:
        return encode_hex(self.take(ADDRESS_LEN))

    def read_bytes(self) -> bytes:
        return self.take(self.read_uleb128())

    def read_string(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid UTF-8 string: {e}") from e

    def read(self, typ: str) -> Any:
        """Read one value of Move type `typ`."""
        if typ in ("address", "ID"):
            return self.read_address()
        if typ in _INT_WIDTHS:
            return self.read_uint(typ)
        if typ == "bool":
            return self.read_bool()
        if typ in ("string", "String"):
            return self.read_string()
        if typ == "vector<u8>":
            return encode_hex(self.read_bytes())
        raise DecodeError(f"unsupported field type {typ!r}")

    def expect_end(self) -> None:
        if self.remaining:
            raise DecodeError(f"{self.remaining} trailing bytes after offset {self.pos}")


# ---------- encoders (used to build fixtures and replay payloads) ----------


def encode_uleb128(n: int) -> bytes:
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_value(typ: str, value: Any) -> bytes:
    """Encode one value of Move type `typ` (inverse of `BcsReader.read`)."""
    if typ in ("address", "ID"):
        raw = bytes.fromhex(str(value).removeprefix("0x").zfill(2 * ADDRESS_LEN))
        if len(raw) != ADDRESS_LEN:
            raise ValueError(f"address must be {ADDRESS_LEN} bytes: {value!r}")
        return raw
    if typ in _INT_WIDTHS:
        return int(value).to_bytes(_INT_WIDTHS[typ], "little", signed=False)
    if typ == "bool":
        return b"\x01" if value else b"\x00"
    if typ in ("string", "String"):
        raw = str(value).encode("utf-8")
        return encode_uleb128(len(raw)) + raw
    if typ == "vector<u8>":
        raw = bytes.fromhex(str(value).removeprefix("0x"))
        return encode_uleb128(len(raw)) + raw
    raise ValueError(f"unsupported field type {typ!r}")
