import pytest

from suind.decoding.bcs import BcsReader, DecodeError, encode_uleb128, encode_value


def test_uleb128_lengths() -> None:
    assert encode_uleb128(0) == b"\x00"
    assert encode_uleb128(127) == b"\x7f"
    assert encode_uleb128(128) == b"\x80\x01"
    assert BcsReader(b"\xac\x02").read_uleb128() == 300


def test_uleb128_too_long() -> None:
    with pytest.raises(DecodeError):
        BcsReader(b"\xff" * 6).read_uleb128()


def test_integers_are_little_endian() -> None:
    r = BcsReader(b"\x64\x00\x00\x00\x00\x00\x00\x00\x01\x02")
    assert r.read("u64") == 100
    assert r.read("u16") == 0x0201
    r.expect_end()


def test_u256_round_values() -> None:
    value = 2**255 + 7
    assert BcsReader(encode_value("u256", value)).read("u256") == value


def test_bool_rejects_other_bytes() -> None:
    assert BcsReader(b"\x01").read("bool") is True
    with pytest.raises(DecodeError, match="invalid bool"):
        BcsReader(b"\x02").read("bool")


def test_address_is_lowercase_hex() -> None:
    raw = bytes(range(32))
    assert BcsReader(raw).read("address") == "0x" + raw.hex()


def test_short_address_fails() -> None:
    with pytest.raises(DecodeError, match="need 32 bytes"):
        BcsReader(b"\x00" * 31).read("address")


def test_string_utf8() -> None:
    data = encode_value("String", "Sui ☀ pad")
    assert BcsReader(data).read("String") == "Sui ☀ pad"


def test_invalid_utf8_string() -> None:
    with pytest.raises(DecodeError, match="UTF-8"):
        BcsReader(b"\x02\xff\xfe").read("string")


def test_vector_u8_is_hex() -> None:
    assert BcsReader(b"\x03\x01\x02\x03").read("vector<u8>") == "0x010203"


def test_trailing_bytes() -> None:
    r = BcsReader(b"\x01\x00")
    r.read("u8")
    with pytest.raises(DecodeError, match="trailing"):
        r.expect_end()
