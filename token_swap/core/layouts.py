# token_swap/core/layouts.py

from enum import IntEnum
from typing import Any, Mapping, NamedTuple, Union

from construct import Bytes, ConstructError, Container, Int8ul, Struct
from solders.pubkey import Pubkey

from .exceptions import InvalidBufferLengthError, LayoutError, UnknownCurveTypeError
from .uint64 import U64_SIZE, encode_uint64

PUBLIC_KEY_SIZE = 32
CURVE_PARAMETERS_SIZE = 32

PUBLIC_KEY_LAYOUT = Bytes(PUBLIC_KEY_SIZE)
# Fee fields stay as raw 8-byte blobs here; Uint64 does the conversion.
UINT64_LAYOUT = Bytes(U64_SIZE)

PUBLIC_KEY_FIELDS = (
    "token_program_id",
    "token_account_a",
    "token_account_b",
    "token_pool",
    "mint_a",
    "mint_b",
    "fee_account",
)

FEE_FIELDS = (
    "trade_fee_numerator",
    "trade_fee_denominator",
    "owner_trade_fee_numerator",
    "owner_trade_fee_denominator",
    "owner_withdraw_fee_numerator",
    "owner_withdraw_fee_denominator",
    "host_fee_numerator",
    "host_fee_denominator",
)

# Field order and widths must match the on-chain program's account layout.
TOKEN_SWAP_LAYOUT = Struct(
    "version" / Int8ul,
    "is_initialized" / Int8ul,
    "nonce" / Int8ul,
    "token_program_id" / PUBLIC_KEY_LAYOUT,
    "token_account_a" / PUBLIC_KEY_LAYOUT,
    "token_account_b" / PUBLIC_KEY_LAYOUT,
    "token_pool" / PUBLIC_KEY_LAYOUT,
    "mint_a" / PUBLIC_KEY_LAYOUT,
    "mint_b" / PUBLIC_KEY_LAYOUT,
    "fee_account" / PUBLIC_KEY_LAYOUT,
    "trade_fee_numerator" / UINT64_LAYOUT,
    "trade_fee_denominator" / UINT64_LAYOUT,
    "owner_trade_fee_numerator" / UINT64_LAYOUT,
    "owner_trade_fee_denominator" / UINT64_LAYOUT,
    "owner_withdraw_fee_numerator" / UINT64_LAYOUT,
    "owner_withdraw_fee_denominator" / UINT64_LAYOUT,
    "host_fee_numerator" / UINT64_LAYOUT,
    "host_fee_denominator" / UINT64_LAYOUT,
    "curve_type" / Int8ul,
    "curve_parameters" / Bytes(CURVE_PARAMETERS_SIZE),
)

# 324 bytes; also the space requested when the swap account is created
TOKEN_SWAP_ACCOUNT_SIZE = TOKEN_SWAP_LAYOUT.sizeof()


class CurveType(IntEnum):
    CONSTANT_PRODUCT = 0
    CONSTANT_PRICE = 1
    # Offset curve, like Uniswap, but with an additional offset on the token B side
    OFFSET = 3


def parse_curve_type(value: int) -> CurveType:
    try:
        return CurveType(value)
    except ValueError:
        raise UnknownCurveTypeError(value) from None


def pad_curve_parameters(params: bytes = b"") -> bytes:
    """Zero-pads curve parameters to their fixed 32-byte slot."""
    params = bytes(params or b"")
    if len(params) > CURVE_PARAMETERS_SIZE:
        raise InvalidBufferLengthError(CURVE_PARAMETERS_SIZE, len(params), "curve parameters")
    return params.ljust(CURVE_PARAMETERS_SIZE, b"\x00")


def _pubkey_bytes(value: Union[Pubkey, bytes]) -> bytes:
    raw = bytes(value)
    if len(raw) != PUBLIC_KEY_SIZE:
        raise InvalidBufferLengthError(PUBLIC_KEY_SIZE, len(raw), "public key")
    return raw


def decode_token_swap_layout(data: bytes) -> Container:
    """Parses raw swap account data into its fields. Keys and fees stay raw bytes."""
    if len(data) != TOKEN_SWAP_ACCOUNT_SIZE:
        raise InvalidBufferLengthError(TOKEN_SWAP_ACCOUNT_SIZE, len(data), "token swap account")
    try:
        return TOKEN_SWAP_LAYOUT.parse(bytes(data))
    except ConstructError as e:
        raise LayoutError(f"Failed to parse token swap account: {e}") from e


def encode_token_swap_layout(fields: Mapping[str, Any]) -> bytes:
    """
    Serializes a swap account record.

    Public keys may be given as Pubkey or 32 raw bytes, fees as ints or
    8-byte blobs. Curve parameters shorter than 32 bytes are zero-padded.
    """
    values = dict(fields)
    for name in PUBLIC_KEY_FIELDS:
        values[name] = _pubkey_bytes(values[name])
    for name in FEE_FIELDS:
        fee = values[name]
        values[name] = bytes(fee) if isinstance(fee, (bytes, bytearray)) else encode_uint64(fee)
    values["curve_type"] = int(parse_curve_type(values["curve_type"]))
    values["curve_parameters"] = pad_curve_parameters(values.get("curve_parameters", b""))
    try:
        return TOKEN_SWAP_LAYOUT.build(values)
    except ConstructError as e:
        raise LayoutError(f"Failed to build token swap account: {e}") from e


class Fees(NamedTuple):
    """The four fee ratios a pool charges, as numerator/denominator pairs."""
    trade_fee_numerator: int
    trade_fee_denominator: int
    owner_trade_fee_numerator: int
    owner_trade_fee_denominator: int
    owner_withdraw_fee_numerator: int
    owner_withdraw_fee_denominator: int
    host_fee_numerator: int
    host_fee_denominator: int
