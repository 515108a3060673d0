# tests/test_pool_state.py

import pytest
from solders.pubkey import Pubkey

from token_swap.core.exceptions import (
    InvalidBufferLengthError,
    UninitializedAccountError,
    UnknownCurveTypeError,
)
from token_swap.core.layouts import (
    CURVE_PARAMETERS_SIZE,
    TOKEN_SWAP_ACCOUNT_SIZE,
    CurveType,
    Fees,
    encode_token_swap_layout,
)
from token_swap.core.pool_state import (
    PoolState,
    authority_deriver,
    decode_pool_state,
    encode_pool_state,
    find_authority,
)
from token_swap.core.uint64 import Uint64

CURVE_TYPE_OFFSET = TOKEN_SWAP_ACCOUNT_SIZE - CURVE_PARAMETERS_SIZE - 1


def with_curve_type(data: bytes, value: int) -> bytes:
    raw = bytearray(data)
    raw[CURVE_TYPE_OFFSET] = value
    return bytes(raw)


def test_decode(pool_fields, pool_bytes, swap_address, program_id, fees):
    state = decode_pool_state(swap_address, pool_bytes, authority_deriver(program_id))

    assert isinstance(state, PoolState)
    assert state.address == swap_address
    assert state.authority == Pubkey.find_program_address([bytes(swap_address)], program_id)[0]
    assert state.version == 1
    assert state.is_initialized is True
    assert state.nonce == 254
    assert state.token_program_id == pool_fields["token_program_id"]
    assert state.token_account_a == pool_fields["token_account_a"]
    assert state.token_account_b == pool_fields["token_account_b"]
    assert state.pool_token_mint == pool_fields["token_pool"]
    assert state.mint_a == pool_fields["mint_a"]
    assert state.mint_b == pool_fields["mint_b"]
    assert state.fee_account == pool_fields["fee_account"]
    assert state.fees == fees
    assert all(isinstance(value, Uint64) for value in state.fees)
    assert state.curve_type is CurveType.CONSTANT_PRODUCT
    assert state.curve_parameters == bytes(range(32))


def test_uses_supplied_authority_deriver(pool_bytes, swap_address):
    fixed = Pubkey.new_unique()
    seen = []

    def derive(address):
        seen.append(address)
        return fixed

    state = decode_pool_state(swap_address, pool_bytes, derive)
    assert state.authority == fixed
    assert seen == [swap_address]


def test_find_authority_matches_deriver(swap_address, program_id):
    authority, nonce = find_authority(swap_address, program_id)
    assert authority_deriver(program_id)(swap_address) == authority
    assert 0 <= nonce <= 255


def test_uninitialized_rejected(pool_fields, swap_address, program_id):
    pool_fields["is_initialized"] = 0
    with pytest.raises(UninitializedAccountError):
        decode_pool_state(swap_address, encode_token_swap_layout(pool_fields), authority_deriver(program_id))


def test_uninitialized_checked_before_other_fields(pool_fields, swap_address):
    pool_fields["is_initialized"] = 0
    data = with_curve_type(encode_token_swap_layout(pool_fields), 2)

    def never_called(_address):
        raise AssertionError("authority must not be derived for an uninitialized account")

    with pytest.raises(UninitializedAccountError):
        decode_pool_state(swap_address, data, never_called)


def test_all_zero_account_is_uninitialized(swap_address, program_id):
    with pytest.raises(UninitializedAccountError):
        decode_pool_state(swap_address, bytes(324), authority_deriver(program_id))


def test_unknown_curve_type(pool_bytes, swap_address, program_id):
    with pytest.raises(UnknownCurveTypeError) as exc_info:
        decode_pool_state(swap_address, with_curve_type(pool_bytes, 2), authority_deriver(program_id))
    assert exc_info.value.value == 2


def test_encode_rejects_unknown_curve_type(pool_fields):
    pool_fields["curve_type"] = 2
    with pytest.raises(UnknownCurveTypeError):
        encode_token_swap_layout(pool_fields)


def test_wrong_length(pool_bytes, swap_address, program_id):
    with pytest.raises(InvalidBufferLengthError):
        decode_pool_state(swap_address, pool_bytes[:-1], authority_deriver(program_id))


def test_encode_round_trip(pool_bytes, swap_address, program_id):
    state = decode_pool_state(swap_address, pool_bytes, authority_deriver(program_id))
    assert encode_pool_state(state) == pool_bytes


def test_state_is_frozen(pool_bytes, swap_address, program_id):
    state = decode_pool_state(swap_address, pool_bytes, authority_deriver(program_id))
    with pytest.raises(AttributeError):
        state.nonce = 1


def test_large_fees(pool_fields, swap_address, program_id):
    pool_fields["trade_fee_denominator"] = 2**64 - 1
    state = decode_pool_state(swap_address, encode_token_swap_layout(pool_fields), authority_deriver(program_id))
    assert state.trade_fee_denominator == 2**64 - 1
    assert state.fees == Fees(25, 2**64 - 1, 5, 10000, 0, 0, 20, 100)
