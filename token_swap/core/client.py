# token_swap/core/client.py

import asyncio
from typing import Optional

from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from solders.transaction_status import TransactionStatus

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.types import TxOpts

from .exceptions import AccountNotFoundError, InvalidAccountOwnerError
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 2


class SolanaClient:
    """Thin async RPC wrapper: fetch account bytes, rent, send and confirm."""

    def __init__(
        self,
        rpc_endpoint: str,
        commitment: Commitment = Confirmed,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        skip_preflight: bool = False,
        async_client: Optional[AsyncClient] = None,
    ) -> None:
        self.rpc_endpoint = rpc_endpoint
        self.async_client = async_client or AsyncClient(
            rpc_endpoint, commitment=commitment, timeout=timeout_seconds
        )
        self.commitment = commitment
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay = retry_delay_seconds
        self.skip_preflight = skip_preflight
        self.tx_opts = TxOpts(
            skip_preflight=self.skip_preflight,
            preflight_commitment=self.commitment,
            max_retries=0,  # retries are handled in transactions.submit_and_confirm
        )
        logger.info(f"SolanaClient initialized: {rpc_endpoint} @ {self.commitment}")

    async def __aenter__(self) -> "SolanaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.async_client.close()
        logger.info("SolanaClient connection closed.")

    async def get_latest_blockhash(self) -> Optional[Hash]:
        resp = await self.async_client.get_latest_blockhash(self.commitment)
        return resp.value.blockhash if resp.value else None

    async def fetch_account_bytes(
        self,
        address: Pubkey,
        expected_owner: Optional[Pubkey] = None,
    ) -> bytes:
        """Raw account data. Fails if the account is absent or owned by another program."""
        resp = await self.async_client.get_account_info(
            address, commitment=self.commitment, encoding="base64"
        )
        account = resp.value
        if account is None:
            raise AccountNotFoundError(f"Failed to find account {address}")
        if expected_owner is not None and account.owner != expected_owner:
            raise InvalidAccountOwnerError(
                f"Invalid account owner for {address}: {account.owner} (expected {expected_owner})"
            )
        return bytes(account.data)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        resp = await self.async_client.get_minimum_balance_for_rent_exemption(size, self.commitment)
        return resp.value

    async def send_versioned_transaction(
        self,
        transaction: VersionedTransaction,
        opts: Optional[TxOpts] = None,
    ) -> Signature:
        resp = await self.async_client.send_transaction(transaction, opts=opts or self.tx_opts)
        return resp.value

    async def confirm_signature(
        self,
        signature: Signature,
        commitment: Optional[Commitment] = None,
        timeout_seconds: Optional[float] = None,
        sleep_seconds: float = 1.0,
    ) -> Optional[TransactionStatus]:
        """Waits for the signature to reach the commitment level. None on timeout."""
        _commit = commitment or self.commitment
        _timeout = timeout_seconds or self.timeout_seconds
        logger.debug(f"Confirming {signature} @ {_commit} timeout={_timeout}")
        try:
            resp = await asyncio.wait_for(
                self.async_client.confirm_transaction(signature, _commit, sleep_seconds=sleep_seconds),
                timeout=_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Confirmation of {signature} timed out after {_timeout}s")
            return None
        if resp.value and resp.value[0]:
            return resp.value[0]
        return None
