# token_swap/core/__init__.py

from .client import SolanaClient
from .exceptions import (
    AccountNotFoundError,
    InstructionBuildError,
    InvalidAccountOwnerError,
    InvalidBufferLengthError,
    InvalidValueError,
    LayoutError,
    MissingRequiredAccountError,
    NegativeValueError,
    SendTransactionError,
    TokenSwapError,
    UninitializedAccountError,
    UnknownCurveTypeError,
    UnknownInstructionError,
    ValueTooLargeError,
)
from .instructions import (
    TokenSwapInstruction,
    WithHostFee,
    WithoutHostFee,
    build_instruction,
    decode_instruction_data,
)
from .layouts import TOKEN_SWAP_ACCOUNT_SIZE, TOKEN_SWAP_LAYOUT, CurveType, Fees
from .pool_state import PoolState, authority_deriver, decode_pool_state, find_authority
from .pubkeys import TOKEN_SWAP_PROGRAM_ID, SolanaProgramAddresses, TokenSwapAddresses
from .swap_pool import TokenSwap
from .transactions import TransactionSendResult, submit_and_confirm
from .uint64 import Uint64, decode_uint64, encode_uint64
from .wallet import Wallet

__all__ = [
    "SolanaClient",
    "AccountNotFoundError",
    "InstructionBuildError",
    "InvalidAccountOwnerError",
    "InvalidBufferLengthError",
    "InvalidValueError",
    "LayoutError",
    "MissingRequiredAccountError",
    "NegativeValueError",
    "SendTransactionError",
    "TokenSwapError",
    "UninitializedAccountError",
    "UnknownCurveTypeError",
    "UnknownInstructionError",
    "ValueTooLargeError",
    "TokenSwapInstruction",
    "WithHostFee",
    "WithoutHostFee",
    "build_instruction",
    "decode_instruction_data",
    "TOKEN_SWAP_ACCOUNT_SIZE",
    "TOKEN_SWAP_LAYOUT",
    "CurveType",
    "Fees",
    "PoolState",
    "authority_deriver",
    "decode_pool_state",
    "find_authority",
    "TOKEN_SWAP_PROGRAM_ID",
    "SolanaProgramAddresses",
    "TokenSwapAddresses",
    "TokenSwap",
    "TransactionSendResult",
    "submit_and_confirm",
    "Uint64",
    "decode_uint64",
    "encode_uint64",
    "Wallet",
]
