# tests/test_uint64.py

import pytest

from token_swap.core.exceptions import (
    CodecError,
    InvalidBufferLengthError,
    InvalidValueError,
    NegativeValueError,
    TokenSwapError,
    ValueTooLargeError,
)
from token_swap.core.uint64 import U64_MAX, Uint64, decode_uint64, encode_uint64


@pytest.mark.parametrize("value", [0, 1, 255, 256, 1000, 2**53 + 1, 2**63, U64_MAX])
def test_round_trip(value):
    encoded = encode_uint64(value)
    assert len(encoded) == 8
    assert decode_uint64(encoded) == value


def test_little_endian_zero_padded():
    assert encode_uint64(1) == b"\x01" + b"\x00" * 7
    assert encode_uint64(0x0102) == b"\x02\x01" + b"\x00" * 6
    assert encode_uint64(0) == b"\x00" * 8


def test_max_value_is_all_ff():
    assert encode_uint64(2**64 - 1) == b"\xff" * 8


def test_too_large_fails():
    with pytest.raises(ValueTooLargeError):
        encode_uint64(2**64)
    with pytest.raises(ValueTooLargeError):
        Uint64(2**80)


def test_negative_fails():
    with pytest.raises(NegativeValueError):
        encode_uint64(-1)


@pytest.mark.parametrize("length", [0, 7, 9, 16])
def test_decode_requires_eight_bytes(length):
    with pytest.raises(InvalidBufferLengthError) as exc_info:
        decode_uint64(b"\x01" * length)
    assert exc_info.value.expected == 8
    assert exc_info.value.actual == length


def test_decode_has_no_sign_bit():
    assert decode_uint64(b"\x00" * 7 + b"\x80") == 2**63


def test_from_string_and_float():
    assert Uint64("18446744073709551615") == U64_MAX
    assert Uint64("1_000") == 1000
    assert Uint64(5.0) == 5
    with pytest.raises(InvalidValueError):
        Uint64(1.5)


@pytest.mark.parametrize("value", ["", "12abc", "0x10", "1.5", 1.5, float("nan"), float("inf")])
def test_unreadable_input_is_codec_error(value):
    with pytest.raises(CodecError):
        Uint64(value)
    with pytest.raises(TokenSwapError):
        encode_uint64(value)


def test_bytes_need_from_buffer():
    with pytest.raises(TypeError):
        Uint64(b"\x00" * 8)


def test_is_int_and_immutable_value():
    value = Uint64(42)
    assert isinstance(value, int)
    assert value + 1 == 43
    assert repr(value) == "Uint64(42)"
    assert Uint64.from_buffer(value.to_buffer()) == value
