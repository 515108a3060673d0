# token_swap/core/instructions.py

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from borsh_construct import CStruct, U8
from construct import Bytes, ConstructError
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .exceptions import (
    InstructionBuildError,
    InvalidBufferLengthError,
    MissingRequiredAccountError,
    UnknownInstructionError,
)
from .layouts import CURVE_PARAMETERS_SIZE, FEE_FIELDS, Fees, pad_curve_parameters, parse_curve_type
from .pubkeys import TOKEN_SWAP_PROGRAM_ID
from .uint64 import U64_SIZE, Uint64, encode_uint64
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TokenSwapInstruction(IntEnum):
    INITIALIZE = 0
    SWAP = 1
    DEPOSIT_ALL_TOKEN_TYPES = 2
    WITHDRAW_ALL_TOKEN_TYPES = 3
    DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN = 4
    WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT = 5


# --- Instruction Data Layouts ---
# First byte is always the opcode. u64 slots are filled with Uint64 output.
U64_SLOT = Bytes(U64_SIZE)

INITIALIZE_LAYOUT = CStruct(
    "instruction" / U8,
    "nonce" / U8,
    "trade_fee_numerator" / U64_SLOT,
    "trade_fee_denominator" / U64_SLOT,
    "owner_trade_fee_numerator" / U64_SLOT,
    "owner_trade_fee_denominator" / U64_SLOT,
    "owner_withdraw_fee_numerator" / U64_SLOT,
    "owner_withdraw_fee_denominator" / U64_SLOT,
    "host_fee_numerator" / U64_SLOT,
    "host_fee_denominator" / U64_SLOT,
    "curve_type" / U8,
    "curve_parameters" / Bytes(CURVE_PARAMETERS_SIZE),
)

SWAP_LAYOUT = CStruct(
    "instruction" / U8,
    "amount_in" / U64_SLOT,
    "minimum_amount_out" / U64_SLOT,
)

DEPOSIT_ALL_TOKEN_TYPES_LAYOUT = CStruct(
    "instruction" / U8,
    "pool_token_amount" / U64_SLOT,
    "maximum_token_a" / U64_SLOT,
    "maximum_token_b" / U64_SLOT,
)

WITHDRAW_ALL_TOKEN_TYPES_LAYOUT = CStruct(
    "instruction" / U8,
    "pool_token_amount" / U64_SLOT,
    "minimum_token_a" / U64_SLOT,
    "minimum_token_b" / U64_SLOT,
)

DEPOSIT_SINGLE_TOKEN_TYPE_LAYOUT = CStruct(
    "instruction" / U8,
    "source_token_amount" / U64_SLOT,
    "minimum_pool_token_amount" / U64_SLOT,
)

WITHDRAW_SINGLE_TOKEN_TYPE_LAYOUT = CStruct(
    "instruction" / U8,
    "destination_token_amount" / U64_SLOT,
    "maximum_pool_token_amount" / U64_SLOT,
)

INSTRUCTION_LAYOUTS = {
    TokenSwapInstruction.INITIALIZE: INITIALIZE_LAYOUT,
    TokenSwapInstruction.SWAP: SWAP_LAYOUT,
    TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES: DEPOSIT_ALL_TOKEN_TYPES_LAYOUT,
    TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES: WITHDRAW_ALL_TOKEN_TYPES_LAYOUT,
    TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN: DEPOSIT_SINGLE_TOKEN_TYPE_LAYOUT,
    TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT: WITHDRAW_SINGLE_TOKEN_TYPE_LAYOUT,
}

# Account roles each builder requires, in wire order.
INSTRUCTION_ACCOUNTS = {
    TokenSwapInstruction.INITIALIZE: (
        "token_swap", "authority", "token_account_a", "token_account_b",
        "pool_token_mint", "fee_account", "token_account_pool", "token_program_id",
    ),
    TokenSwapInstruction.SWAP: (
        "token_swap", "authority", "user_transfer_authority", "user_source",
        "pool_source", "pool_destination", "user_destination", "pool_token_mint",
        "fee_account", "token_program_id",
    ),
    TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES: (
        "token_swap", "authority", "user_transfer_authority", "source_a", "source_b",
        "into_a", "into_b", "pool_token_mint", "pool_account", "token_program_id",
    ),
    TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES: (
        "token_swap", "authority", "user_transfer_authority", "pool_token_mint",
        "source_pool_account", "from_a", "from_b", "user_account_a", "user_account_b",
        "fee_account", "token_program_id",
    ),
    TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN: (
        "token_swap", "authority", "user_transfer_authority", "source", "into_a",
        "into_b", "pool_token_mint", "pool_account", "token_program_id",
    ),
    TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT: (
        "token_swap", "authority", "user_transfer_authority", "pool_token_mint",
        "source_pool_account", "from_a", "from_b", "user_account", "fee_account",
        "token_program_id",
    ),
}

INSTRUCTION_ARGUMENTS = {
    TokenSwapInstruction.INITIALIZE: ("nonce", "fees", "curve_type"),
    TokenSwapInstruction.SWAP: ("amount_in", "minimum_amount_out"),
    TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES: ("pool_token_amount", "maximum_token_a", "maximum_token_b"),
    TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES: ("pool_token_amount", "minimum_token_a", "minimum_token_b"),
    TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN: (
        "source_token_amount", "minimum_pool_token_amount"),
    TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT: (
        "destination_token_amount", "maximum_pool_token_amount"),
}


# --- Host fee account for swaps ---
@dataclass(frozen=True)
class WithHostFee:
    account: Pubkey


@dataclass(frozen=True)
class WithoutHostFee:
    pass


HostFee = Union[WithHostFee, WithoutHostFee]
WITHOUT_HOST_FEE = WithoutHostFee()


def host_fee_variant(value: Union[HostFee, Pubkey, None]) -> HostFee:
    if value is None:
        return WITHOUT_HOST_FEE
    if isinstance(value, (WithHostFee, WithoutHostFee)):
        return value
    if isinstance(value, Pubkey):
        return WithHostFee(value)
    raise TypeError(f"Unsupported host fee value: {value!r}")


# --- Helpers ---
def _require_accounts(instruction: TokenSwapInstruction, accounts: Mapping[str, Optional[Pubkey]]) -> None:
    for role in INSTRUCTION_ACCOUNTS[instruction]:
        if accounts.get(role) is None:
            raise MissingRequiredAccountError(role, instruction.name)


def _encode_data(instruction: TokenSwapInstruction, fields: Dict[str, Any]) -> bytes:
    try:
        return INSTRUCTION_LAYOUTS[instruction].build({"instruction": int(instruction), **fields})
    except ConstructError as e:
        raise InstructionBuildError(f"Failed to build {instruction.name} instruction data: {e}") from e


def instruction_opcode(ix: Instruction) -> TokenSwapInstruction:
    data = bytes(ix.data)
    if not data:
        raise UnknownInstructionError("Instruction has no data")
    try:
        return TokenSwapInstruction(data[0])
    except ValueError:
        raise UnknownInstructionError(f"Unknown token swap opcode: {data[0]}") from None


def decode_instruction_data(data: bytes) -> Tuple[TokenSwapInstruction, Dict[str, Any]]:
    """Parses instruction data back into its opcode and typed fields."""
    data = bytes(data)
    if not data:
        raise UnknownInstructionError("Instruction has no data")
    try:
        instruction = TokenSwapInstruction(data[0])
    except ValueError:
        raise UnknownInstructionError(f"Unknown token swap opcode: {data[0]}") from None
    layout = INSTRUCTION_LAYOUTS[instruction]
    if len(data) != layout.sizeof():
        raise InvalidBufferLengthError(layout.sizeof(), len(data), f"{instruction.name} data")
    parsed = layout.parse(data)

    fields: Dict[str, Any] = {}
    for name, value in parsed.items():
        if name.startswith("_") or name == "instruction":
            continue
        if name == "curve_type":
            value = parse_curve_type(value)
        elif isinstance(value, bytes) and len(value) == U64_SIZE:
            value = Uint64.from_buffer(value)
        fields[name] = value
    return instruction, fields


# --- Instruction Builders ---
def initialize_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    token_account_a: Pubkey,
    token_account_b: Pubkey,
    pool_token_mint: Pubkey,
    fee_account: Pubkey,
    token_account_pool: Pubkey,
    token_program_id: Pubkey,
    nonce: int,
    fees: Fees,
    curve_type: int,
    curve_parameters: bytes = b"",
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    """Builds InitializeSwap. token_account_pool receives the initial pool tokens."""
    op = TokenSwapInstruction.INITIALIZE
    _require_accounts(op, locals())

    fees = Fees(*fees)
    data = _encode_data(op, {
        "nonce": nonce,
        **{name: encode_uint64(getattr(fees, name)) for name in FEE_FIELDS},
        "curve_type": int(parse_curve_type(curve_type)),
        "curve_parameters": pad_curve_parameters(curve_parameters),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=True),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=token_account_a, is_signer=False, is_writable=False),  # 2. token A
        AccountMeta(pubkey=token_account_b, is_signer=False, is_writable=False),  # 3. token B
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 4. pool mint
        AccountMeta(pubkey=fee_account, is_signer=False, is_writable=False),  # 5. fee account
        AccountMeta(pubkey=token_account_pool, is_signer=False, is_writable=True),  # 6. pool token destination
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 7. token program
    ]
    logger.debug(f"Built {op.name} instruction for swap {token_swap}")
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def swap_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    user_transfer_authority: Pubkey,
    user_source: Pubkey,
    pool_source: Pubkey,
    pool_destination: Pubkey,
    user_destination: Pubkey,
    pool_token_mint: Pubkey,
    fee_account: Pubkey,
    token_program_id: Pubkey,
    amount_in: int,
    minimum_amount_out: int,
    host_fee: Union[HostFee, Pubkey, None] = WITHOUT_HOST_FEE,
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    """
    Builds Swap.

    The program decides whether to split the fee with a host by the number of
    accounts it receives, so the host fee account is appended only for
    WithHostFee.
    """
    op = TokenSwapInstruction.SWAP
    _require_accounts(op, locals())
    host_fee = host_fee_variant(host_fee)

    data = _encode_data(op, {
        "amount_in": encode_uint64(amount_in),
        "minimum_amount_out": encode_uint64(minimum_amount_out),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=False),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=user_transfer_authority, is_signer=True, is_writable=False),  # 2. user transfer authority
        AccountMeta(pubkey=user_source, is_signer=False, is_writable=True),  # 3. user source
        AccountMeta(pubkey=pool_source, is_signer=False, is_writable=True),  # 4. pool source
        AccountMeta(pubkey=pool_destination, is_signer=False, is_writable=True),  # 5. pool destination
        AccountMeta(pubkey=user_destination, is_signer=False, is_writable=True),  # 6. user destination
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 7. pool mint
        AccountMeta(pubkey=fee_account, is_signer=False, is_writable=True),  # 8. fee account
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 9. token program
    ]
    if isinstance(host_fee, WithHostFee):
        accounts.append(AccountMeta(pubkey=host_fee.account, is_signer=False, is_writable=True))  # 10. host fee
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def deposit_all_token_types_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    user_transfer_authority: Pubkey,
    source_a: Pubkey,
    source_b: Pubkey,
    into_a: Pubkey,
    into_b: Pubkey,
    pool_token_mint: Pubkey,
    pool_account: Pubkey,
    token_program_id: Pubkey,
    pool_token_amount: int,
    maximum_token_a: int,
    maximum_token_b: int,
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    op = TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES
    _require_accounts(op, locals())

    data = _encode_data(op, {
        "pool_token_amount": encode_uint64(pool_token_amount),
        "maximum_token_a": encode_uint64(maximum_token_a),
        "maximum_token_b": encode_uint64(maximum_token_b),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=False),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=user_transfer_authority, is_signer=True, is_writable=False),  # 2. user transfer authority
        AccountMeta(pubkey=source_a, is_signer=False, is_writable=True),  # 3. user token A
        AccountMeta(pubkey=source_b, is_signer=False, is_writable=True),  # 4. user token B
        AccountMeta(pubkey=into_a, is_signer=False, is_writable=True),  # 5. pool token A
        AccountMeta(pubkey=into_b, is_signer=False, is_writable=True),  # 6. pool token B
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 7. pool mint
        AccountMeta(pubkey=pool_account, is_signer=False, is_writable=True),  # 8. user pool token destination
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 9. token program
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def withdraw_all_token_types_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    user_transfer_authority: Pubkey,
    pool_token_mint: Pubkey,
    fee_account: Pubkey,
    source_pool_account: Pubkey,
    from_a: Pubkey,
    from_b: Pubkey,
    user_account_a: Pubkey,
    user_account_b: Pubkey,
    token_program_id: Pubkey,
    pool_token_amount: int,
    minimum_token_a: int,
    minimum_token_b: int,
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    op = TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES
    _require_accounts(op, locals())

    data = _encode_data(op, {
        "pool_token_amount": encode_uint64(pool_token_amount),
        "minimum_token_a": encode_uint64(minimum_token_a),
        "minimum_token_b": encode_uint64(minimum_token_b),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=False),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=user_transfer_authority, is_signer=True, is_writable=False),  # 2. user transfer authority
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 3. pool mint
        AccountMeta(pubkey=source_pool_account, is_signer=False, is_writable=True),  # 4. user pool token source
        AccountMeta(pubkey=from_a, is_signer=False, is_writable=True),  # 5. pool token A
        AccountMeta(pubkey=from_b, is_signer=False, is_writable=True),  # 6. pool token B
        AccountMeta(pubkey=user_account_a, is_signer=False, is_writable=True),  # 7. user token A
        AccountMeta(pubkey=user_account_b, is_signer=False, is_writable=True),  # 8. user token B
        AccountMeta(pubkey=fee_account, is_signer=False, is_writable=True),  # 9. fee account
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 10. token program
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def deposit_single_token_type_exact_amount_in_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    user_transfer_authority: Pubkey,
    source: Pubkey,
    into_a: Pubkey,
    into_b: Pubkey,
    pool_token_mint: Pubkey,
    pool_account: Pubkey,
    token_program_id: Pubkey,
    source_token_amount: int,
    minimum_pool_token_amount: int,
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    op = TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN
    _require_accounts(op, locals())

    data = _encode_data(op, {
        "source_token_amount": encode_uint64(source_token_amount),
        "minimum_pool_token_amount": encode_uint64(minimum_pool_token_amount),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=False),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=user_transfer_authority, is_signer=True, is_writable=False),  # 2. user transfer authority
        AccountMeta(pubkey=source, is_signer=False, is_writable=True),  # 3. user source (A or B)
        AccountMeta(pubkey=into_a, is_signer=False, is_writable=True),  # 4. pool token A
        AccountMeta(pubkey=into_b, is_signer=False, is_writable=True),  # 5. pool token B
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 6. pool mint
        AccountMeta(pubkey=pool_account, is_signer=False, is_writable=True),  # 7. user pool token destination
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 8. token program
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def withdraw_single_token_type_exact_amount_out_instruction(
    *,
    token_swap: Pubkey,
    authority: Pubkey,
    user_transfer_authority: Pubkey,
    pool_token_mint: Pubkey,
    fee_account: Pubkey,
    source_pool_account: Pubkey,
    from_a: Pubkey,
    from_b: Pubkey,
    user_account: Pubkey,
    token_program_id: Pubkey,
    destination_token_amount: int,
    maximum_pool_token_amount: int,
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    op = TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT
    _require_accounts(op, locals())

    data = _encode_data(op, {
        "destination_token_amount": encode_uint64(destination_token_amount),
        "maximum_pool_token_amount": encode_uint64(maximum_pool_token_amount),
    })

    accounts = [
        AccountMeta(pubkey=token_swap, is_signer=False, is_writable=False),  # 0. swap account
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # 1. swap authority
        AccountMeta(pubkey=user_transfer_authority, is_signer=True, is_writable=False),  # 2. user transfer authority
        AccountMeta(pubkey=pool_token_mint, is_signer=False, is_writable=True),  # 3. pool mint
        AccountMeta(pubkey=source_pool_account, is_signer=False, is_writable=True),  # 4. user pool token source
        AccountMeta(pubkey=from_a, is_signer=False, is_writable=True),  # 5. pool token A
        AccountMeta(pubkey=from_b, is_signer=False, is_writable=True),  # 6. pool token B
        AccountMeta(pubkey=user_account, is_signer=False, is_writable=True),  # 7. user destination (A or B)
        AccountMeta(pubkey=fee_account, is_signer=False, is_writable=True),  # 8. fee account
        AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),  # 9. token program
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


INSTRUCTION_BUILDERS = {
    TokenSwapInstruction.INITIALIZE: initialize_instruction,
    TokenSwapInstruction.SWAP: swap_instruction,
    TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES: deposit_all_token_types_instruction,
    TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES: withdraw_all_token_types_instruction,
    TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN:
        deposit_single_token_type_exact_amount_in_instruction,
    TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT:
        withdraw_single_token_type_exact_amount_out_instruction,
}


def build_instruction(
    opcode: int,
    args: Mapping[str, Any],
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
) -> Instruction:
    """
    Builds any token swap instruction from its opcode and a mapping of the
    matching builder's keyword arguments.
    """
    try:
        op = TokenSwapInstruction(opcode)
    except ValueError:
        raise UnknownInstructionError(f"Unknown token swap opcode: {opcode}") from None

    _require_accounts(op, args)
    missing = [name for name in INSTRUCTION_ARGUMENTS[op] if args.get(name) is None]
    if missing:
        raise InstructionBuildError(f"Missing {op.name} arguments: {', '.join(missing)}")

    kwargs = dict(args)
    kwargs.setdefault("program_id", program_id)
    return INSTRUCTION_BUILDERS[op](**kwargs)
