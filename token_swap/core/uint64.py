# token_swap/core/uint64.py

from typing import Union

from .exceptions import InvalidBufferLengthError, InvalidValueError, NegativeValueError, ValueTooLargeError

U64_SIZE = 8
U64_MAX = (1 << 64) - 1


class Uint64(int):
    """
    Some amount of tokens, or a fee component.

    Plain int under the hood, so arithmetic never overflows in Python; the
    64-bit range is checked when the value is created and again when it is
    written out.
    """

    def __new__(cls, value: Union[int, str, float] = 0) -> "Uint64":
        if isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("Use Uint64.from_buffer() for raw bytes")
        if isinstance(value, float):
            if not value.is_integer():
                raise InvalidValueError(f"Uint64 needs an integral value, got {value!r}")
            value = int(value)
        elif isinstance(value, str):
            try:
                value = int(value.strip().replace("_", ""), 10)
            except ValueError:
                raise InvalidValueError(f"Uint64 needs a base-10 integer string, got {value!r}") from None
        value = int(value)
        if value < 0:
            raise NegativeValueError(f"Uint64 cannot be negative: {value}")
        if value > U64_MAX:
            raise ValueTooLargeError(f"Numberu64 too large: {value}")
        return super().__new__(cls, value)

    def to_buffer(self) -> bytes:
        """Little-endian, least significant byte first, zero-padded to 8 bytes."""
        try:
            return int(self).to_bytes(U64_SIZE, "little")
        except OverflowError as e:
            raise ValueTooLargeError(f"Numberu64 too large: {int(self)}") from e

    @classmethod
    def from_buffer(cls, buffer: bytes) -> "Uint64":
        if len(buffer) != U64_SIZE:
            raise InvalidBufferLengthError(U64_SIZE, len(buffer))
        return cls(int.from_bytes(bytes(buffer), "little"))

    def __repr__(self) -> str:
        return f"Uint64({int(self)})"


def encode_uint64(value: Union[int, str, float]) -> bytes:
    return Uint64(value).to_buffer()


def decode_uint64(buffer: bytes) -> Uint64:
    return Uint64.from_buffer(buffer)
