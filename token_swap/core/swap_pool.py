# token_swap/core/swap_pool.py

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from .client import SolanaClient
from .exceptions import SendTransactionError, TokenSwapError
from .instructions import (
    HostFee,
    deposit_all_token_types_instruction,
    deposit_single_token_type_exact_amount_in_instruction,
    initialize_instruction,
    swap_instruction,
    withdraw_all_token_types_instruction,
    withdraw_single_token_type_exact_amount_out_instruction,
)
from .layouts import TOKEN_SWAP_ACCOUNT_SIZE, CurveType, Fees
from .pool_state import PoolState, authority_deriver, decode_pool_state
from .pubkeys import TOKEN_SWAP_PROGRAM_ID, SolanaProgramAddresses
from .transactions import submit_and_confirm
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class TokenSwap:
    """
    A program to exchange tokens against a pool of liquidity.

    Handle over one decoded swap account. The state is a snapshot; call
    refresh() after a state-changing instruction to see new values.
    """
    client: SolanaClient
    state: PoolState
    program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID
    payer: Optional[Keypair] = None

    # --- Pool accessors ---
    @property
    def address(self) -> Pubkey:
        return self.state.address

    @property
    def authority(self) -> Pubkey:
        return self.state.authority

    @property
    def pool_token_mint(self) -> Pubkey:
        return self.state.pool_token_mint

    @property
    def fee_account(self) -> Pubkey:
        return self.state.fee_account

    @property
    def token_account_a(self) -> Pubkey:
        return self.state.token_account_a

    @property
    def token_account_b(self) -> Pubkey:
        return self.state.token_account_b

    @property
    def token_program_id(self) -> Pubkey:
        return self.state.token_program_id

    @property
    def fees(self) -> Fees:
        return self.state.fees

    @property
    def curve_type(self) -> CurveType:
        return self.state.curve_type

    # --- Construction ---
    @staticmethod
    async def get_min_balance_rent_for_exempt_token_swap(client: SolanaClient) -> int:
        """Lamports required for the swap account to be rent exempt."""
        return await client.get_minimum_balance_for_rent_exemption(TOKEN_SWAP_ACCOUNT_SIZE)

    @classmethod
    async def load(
        cls,
        client: SolanaClient,
        address: Pubkey,
        program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
        payer: Optional[Keypair] = None,
    ) -> "TokenSwap":
        data = await client.fetch_account_bytes(address, expected_owner=program_id)
        state = decode_pool_state(address, data, authority_deriver(program_id))
        logger.info(f"Loaded token swap {address} ({state.curve_type.name})")
        return cls(client=client, state=state, program_id=program_id, payer=payer)

    @classmethod
    async def create(
        cls,
        client: SolanaClient,
        payer: Keypair,
        token_swap_account: Keypair,
        authority: Pubkey,
        nonce: int,
        token_account_a: Pubkey,
        token_account_b: Pubkey,
        pool_token_mint: Pubkey,
        fee_account: Pubkey,
        token_account_pool: Pubkey,
        fees: Fees,
        curve_type: int = CurveType.CONSTANT_PRODUCT,
        curve_parameters: bytes = b"",
        program_id: Pubkey = TOKEN_SWAP_PROGRAM_ID,
        token_program_id: Pubkey = SolanaProgramAddresses.TOKEN_PROGRAM_ID,
    ) -> "TokenSwap":
        """
        Creates and initializes a new swap account in one transaction.

        :param authority: program-derived authority of token_swap_account (see find_authority)
        :param nonce: bump seed that derives authority
        :param token_account_pool: receives the initial pool tokens
        """
        init_ix = initialize_instruction(
            token_swap=token_swap_account.pubkey(),
            authority=authority,
            token_account_a=token_account_a,
            token_account_b=token_account_b,
            pool_token_mint=pool_token_mint,
            fee_account=fee_account,
            token_account_pool=token_account_pool,
            token_program_id=token_program_id,
            nonce=nonce,
            fees=fees,
            curve_type=curve_type,
            curve_parameters=curve_parameters,
            program_id=program_id,
        )
        balance_needed = await cls.get_min_balance_rent_for_exempt_token_swap(client)
        create_ix = create_account(
            CreateAccountParams(
                from_pubkey=payer.pubkey(),
                to_pubkey=token_swap_account.pubkey(),
                lamports=balance_needed,
                space=TOKEN_SWAP_ACCOUNT_SIZE,
                owner=program_id,
            )
        )
        await _submit(client, "createAccount and InitializeSwap", [create_ix, init_ix],
                      payer, [token_swap_account])
        return await cls.load(client, token_swap_account.pubkey(), program_id, payer)

    async def refresh(self) -> "TokenSwap":
        return await type(self).load(self.client, self.address, self.program_id, self.payer)

    # --- Operations ---
    async def swap(
        self,
        user_source: Pubkey,
        pool_source: Pubkey,
        pool_destination: Pubkey,
        user_destination: Pubkey,
        host_fee_account: Union[HostFee, Pubkey, None],
        user_transfer_authority: Keypair,
        amount_in: int,
        minimum_amount_out: int,
    ) -> str:
        """
        Swap token A for token B (or back).

        :param user_transfer_authority: account delegated to transfer the user's tokens
        :param minimum_amount_out: least amount of tokens the user will accept
        """
        ix = swap_instruction(
            token_swap=self.address,
            authority=self.authority,
            user_transfer_authority=user_transfer_authority.pubkey(),
            user_source=user_source,
            pool_source=pool_source,
            pool_destination=pool_destination,
            user_destination=user_destination,
            pool_token_mint=self.pool_token_mint,
            fee_account=self.fee_account,
            token_program_id=self.token_program_id,
            amount_in=amount_in,
            minimum_amount_out=minimum_amount_out,
            host_fee=host_fee_account,
            program_id=self.program_id,
        )
        return await self._send("swap", ix, user_transfer_authority)

    async def deposit_all_token_types(
        self,
        user_account_a: Pubkey,
        user_account_b: Pubkey,
        pool_account: Pubkey,
        user_transfer_authority: Keypair,
        pool_token_amount: int,
        maximum_token_a: int,
        maximum_token_b: int,
    ) -> str:
        ix = deposit_all_token_types_instruction(
            token_swap=self.address,
            authority=self.authority,
            user_transfer_authority=user_transfer_authority.pubkey(),
            source_a=user_account_a,
            source_b=user_account_b,
            into_a=self.token_account_a,
            into_b=self.token_account_b,
            pool_token_mint=self.pool_token_mint,
            pool_account=pool_account,
            token_program_id=self.token_program_id,
            pool_token_amount=pool_token_amount,
            maximum_token_a=maximum_token_a,
            maximum_token_b=maximum_token_b,
            program_id=self.program_id,
        )
        return await self._send("depositAllTokenTypes", ix, user_transfer_authority)

    async def withdraw_all_token_types(
        self,
        user_account_a: Pubkey,
        user_account_b: Pubkey,
        pool_account: Pubkey,
        user_transfer_authority: Keypair,
        pool_token_amount: int,
        minimum_token_a: int,
        minimum_token_b: int,
    ) -> str:
        ix = withdraw_all_token_types_instruction(
            token_swap=self.address,
            authority=self.authority,
            user_transfer_authority=user_transfer_authority.pubkey(),
            pool_token_mint=self.pool_token_mint,
            fee_account=self.fee_account,
            source_pool_account=pool_account,
            from_a=self.token_account_a,
            from_b=self.token_account_b,
            user_account_a=user_account_a,
            user_account_b=user_account_b,
            token_program_id=self.token_program_id,
            pool_token_amount=pool_token_amount,
            minimum_token_a=minimum_token_a,
            minimum_token_b=minimum_token_b,
            program_id=self.program_id,
        )
        return await self._send("withdrawAllTokenTypes", ix, user_transfer_authority)

    async def deposit_single_token_type_exact_amount_in(
        self,
        user_account: Pubkey,
        pool_account: Pubkey,
        user_transfer_authority: Keypair,
        source_token_amount: int,
        minimum_pool_token_amount: int,
    ) -> str:
        ix = deposit_single_token_type_exact_amount_in_instruction(
            token_swap=self.address,
            authority=self.authority,
            user_transfer_authority=user_transfer_authority.pubkey(),
            source=user_account,
            into_a=self.token_account_a,
            into_b=self.token_account_b,
            pool_token_mint=self.pool_token_mint,
            pool_account=pool_account,
            token_program_id=self.token_program_id,
            source_token_amount=source_token_amount,
            minimum_pool_token_amount=minimum_pool_token_amount,
            program_id=self.program_id,
        )
        return await self._send("depositSingleTokenTypeExactAmountIn", ix, user_transfer_authority)

    async def withdraw_single_token_type_exact_amount_out(
        self,
        user_account: Pubkey,
        pool_account: Pubkey,
        user_transfer_authority: Keypair,
        destination_token_amount: int,
        maximum_pool_token_amount: int,
    ) -> str:
        ix = withdraw_single_token_type_exact_amount_out_instruction(
            token_swap=self.address,
            authority=self.authority,
            user_transfer_authority=user_transfer_authority.pubkey(),
            pool_token_mint=self.pool_token_mint,
            fee_account=self.fee_account,
            source_pool_account=pool_account,
            from_a=self.token_account_a,
            from_b=self.token_account_b,
            user_account=user_account,
            token_program_id=self.token_program_id,
            destination_token_amount=destination_token_amount,
            maximum_pool_token_amount=maximum_pool_token_amount,
            program_id=self.program_id,
        )
        return await self._send("withdrawSingleTokenTypeExactAmountOut", ix, user_transfer_authority)

    async def _send(self, label: str, ix: Instruction, user_transfer_authority: Keypair) -> str:
        if self.payer is None:
            raise TokenSwapError(f"{label}: TokenSwap was loaded without a payer")
        return await _submit(self.client, label, [ix], self.payer, [user_transfer_authority])


async def _submit(
    client: SolanaClient,
    label: str,
    instructions: Sequence[Instruction],
    payer: Keypair,
    signers: Sequence[Keypair],
) -> str:
    result = await submit_and_confirm(client, instructions, payer, signers, label=label)
    if not result.success:
        raise SendTransactionError(f"{label} failed ({result.error_type}): {result.error_message}")
    return result.signature
