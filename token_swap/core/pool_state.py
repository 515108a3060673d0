# token_swap/core/pool_state.py

from dataclasses import dataclass
from typing import Callable, Tuple

from solders.pubkey import Pubkey

from .exceptions import UninitializedAccountError
from .layouts import (
    FEE_FIELDS,
    CurveType,
    Fees,
    decode_token_swap_layout,
    encode_token_swap_layout,
    parse_curve_type,
)
from .uint64 import Uint64, decode_uint64
from ..utils.logger import get_logger

logger = get_logger(__name__)

AuthorityDeriver = Callable[[Pubkey], Pubkey]


def find_authority(token_swap: Pubkey, program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Program-derived authority of a swap account, seeded by the swap's own address."""
    return Pubkey.find_program_address([bytes(token_swap)], program_id)


def authority_deriver(program_id: Pubkey) -> AuthorityDeriver:
    def derive(token_swap: Pubkey) -> Pubkey:
        authority, _nonce = find_authority(token_swap, program_id)
        return authority

    return derive


@dataclass(frozen=True)
class PoolState:
    """Snapshot of a swap account. Decode a fresh one after every state change."""
    address: Pubkey
    authority: Pubkey
    version: int
    is_initialized: bool
    nonce: int
    token_program_id: Pubkey
    token_account_a: Pubkey
    token_account_b: Pubkey
    pool_token_mint: Pubkey
    mint_a: Pubkey
    mint_b: Pubkey
    fee_account: Pubkey
    trade_fee_numerator: Uint64
    trade_fee_denominator: Uint64
    owner_trade_fee_numerator: Uint64
    owner_trade_fee_denominator: Uint64
    owner_withdraw_fee_numerator: Uint64
    owner_withdraw_fee_denominator: Uint64
    host_fee_numerator: Uint64
    host_fee_denominator: Uint64
    curve_type: CurveType
    curve_parameters: bytes

    @property
    def fees(self) -> Fees:
        return Fees(*(getattr(self, name) for name in FEE_FIELDS))


def decode_pool_state(address: Pubkey, data: bytes, derive_authority: AuthorityDeriver) -> PoolState:
    """
    Turns raw swap account data into a PoolState.

    Raises InvalidBufferLengthError for data of the wrong size,
    UninitializedAccountError when the initialized flag is clear (checked
    before anything else is interpreted) and UnknownCurveTypeError for an
    unrecognised curve.
    """
    raw = decode_token_swap_layout(data)
    if not raw.is_initialized:
        raise UninitializedAccountError(f"Invalid token swap state: {address} is not initialized")

    curve_type = parse_curve_type(raw.curve_type)
    fees = {name: decode_uint64(raw[name]) for name in FEE_FIELDS}
    authority = derive_authority(address)

    state = PoolState(
        address=address,
        authority=authority,
        version=raw.version,
        is_initialized=True,
        nonce=raw.nonce,
        token_program_id=Pubkey.from_bytes(raw.token_program_id),
        token_account_a=Pubkey.from_bytes(raw.token_account_a),
        token_account_b=Pubkey.from_bytes(raw.token_account_b),
        pool_token_mint=Pubkey.from_bytes(raw.token_pool),
        mint_a=Pubkey.from_bytes(raw.mint_a),
        mint_b=Pubkey.from_bytes(raw.mint_b),
        fee_account=Pubkey.from_bytes(raw.fee_account),
        curve_type=curve_type,
        curve_parameters=bytes(raw.curve_parameters),
        **fees,
    )
    logger.debug(f"Decoded token swap {address}: curve={curve_type.name}, pool mint={state.pool_token_mint}")
    return state


def encode_pool_state(state: PoolState) -> bytes:
    """Writes a PoolState back into the on-chain account layout."""
    return encode_token_swap_layout({
        "version": state.version,
        "is_initialized": int(state.is_initialized),
        "nonce": state.nonce,
        "token_program_id": state.token_program_id,
        "token_account_a": state.token_account_a,
        "token_account_b": state.token_account_b,
        "token_pool": state.pool_token_mint,
        "mint_a": state.mint_a,
        "mint_b": state.mint_b,
        "fee_account": state.fee_account,
        **{name: getattr(state, name) for name in FEE_FIELDS},
        "curve_type": state.curve_type,
        "curve_parameters": state.curve_parameters,
    })
