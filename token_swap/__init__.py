# token_swap/__init__.py

from .core import (
    CurveType,
    Fees,
    PoolState,
    TokenSwap,
    TokenSwapInstruction,
    Uint64,
    build_instruction,
    decode_pool_state,
    decode_uint64,
    encode_uint64,
)

__version__ = "0.1.0"

__all__ = [
    "CurveType",
    "Fees",
    "PoolState",
    "TokenSwap",
    "TokenSwapInstruction",
    "Uint64",
    "build_instruction",
    "decode_pool_state",
    "decode_uint64",
    "encode_uint64",
]
