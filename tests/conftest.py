# tests/conftest.py

import pytest
from solders.pubkey import Pubkey

from token_swap.core.layouts import CurveType, Fees, encode_token_swap_layout
from token_swap.core.pubkeys import SolanaProgramAddresses


@pytest.fixture
def program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def swap_address() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def fees() -> Fees:
    return Fees(25, 10000, 5, 10000, 0, 0, 20, 100)


@pytest.fixture
def pool_fields(fees):
    """A fully populated swap account record."""
    return {
        "version": 1,
        "is_initialized": 1,
        "nonce": 254,
        "token_program_id": SolanaProgramAddresses.TOKEN_PROGRAM_ID,
        "token_account_a": Pubkey.new_unique(),
        "token_account_b": Pubkey.new_unique(),
        "token_pool": Pubkey.new_unique(),
        "mint_a": Pubkey.new_unique(),
        "mint_b": Pubkey.new_unique(),
        "fee_account": Pubkey.new_unique(),
        **fees._asdict(),
        "curve_type": CurveType.CONSTANT_PRODUCT,
        "curve_parameters": bytes(range(32)),
    }


@pytest.fixture
def pool_bytes(pool_fields) -> bytes:
    return encode_token_swap_layout(pool_fields)
