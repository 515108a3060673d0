# token_swap/core/transactions.py

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.transaction import VersionedTransaction

from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException, UnconfirmedTxError

from .client import SolanaClient
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Failures worth another attempt; anything else propagates.
RETRYABLE_ERRORS = (SolanaRpcException, RPCException, UnconfirmedTxError, OSError)


@dataclass
class TransactionSendResult:
    success: bool
    signature: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None  # BuildError, SendError, ConfirmError, ConfirmTimeout, TxError
    raw_error: Optional[Any] = None


def _unique_signers(payer: Keypair, signers: Optional[Sequence[Keypair]]) -> List[Keypair]:
    # payer first, no duplicates
    signers_to_use = [payer]
    seen = {payer.pubkey()}
    for s in signers or []:
        if s.pubkey() not in seen:
            signers_to_use.append(s)
            seen.add(s.pubkey())
    return signers_to_use


async def submit_and_confirm(
    client: SolanaClient,
    instructions: Sequence[Instruction],
    payer: Keypair,
    signers: Optional[Sequence[Keypair]] = None,
    label: str = "Transaction",
    confirm: bool = True,
    confirm_timeout_secs: Optional[float] = None,
    max_send_retries: Optional[int] = None,
) -> TransactionSendResult:
    """Builds, signs, sends and optionally confirms a v0 transaction, retrying send failures."""
    signers_to_use = _unique_signers(payer, signers)
    attempts = max_send_retries if max_send_retries is not None else client.max_retries
    attempts = max(1, attempts)
    last_error: Optional[BaseException] = None
    signature = None

    # Only the build/send step is retried; once a signature exists the
    # instructions are never signed again.
    for attempt in range(attempts):
        logger.info(f"{label}: Build/Send attempt {attempt + 1}/{attempts}...")
        try:
            blockhash = await client.get_latest_blockhash()
            if blockhash is None:
                last_error = ValueError("Failed to get blockhash.")
                logger.warning(f"{label}: {last_error}")
            else:
                message = MessageV0.try_compile(
                    payer=payer.pubkey(),
                    instructions=list(instructions),
                    address_lookup_table_accounts=[],
                    recent_blockhash=blockhash,
                )
                tx = VersionedTransaction(message, signers_to_use)
                signature = await client.send_versioned_transaction(tx)
                break
        except RETRYABLE_ERRORS as e:
            last_error = e
            logger.warning(f"{label}: {type(e).__name__} during attempt {attempt + 1}: {e}")

        if attempt < attempts - 1:
            delay = client.retry_delay * (1.5 ** attempt)
            logger.info(f"{label}: Retrying in {delay:.2f}s...")
            await asyncio.sleep(delay)

    if signature is None:
        err_msg = f"Failed after {attempts} attempts."
        error_type = "SendError"
        if last_error is not None:
            err_msg += f" Last error: ({type(last_error).__name__}) {last_error}"
            if isinstance(last_error, ValueError):
                error_type = "BuildError"
        logger.error(f"{label}: {err_msg}")
        return TransactionSendResult(success=False, error_message=err_msg,
                                     error_type=error_type, raw_error=last_error)

    sig_str = str(signature)
    logger.info(f"{label}: Sent. Signature: {sig_str}")
    if not confirm:
        return TransactionSendResult(success=True, signature=sig_str)

    try:
        status = await client.confirm_signature(signature, timeout_seconds=confirm_timeout_secs)
    except RETRYABLE_ERRORS as e:
        err_msg = f"Tx {sig_str} sent but confirmation failed: ({type(e).__name__}) {e}"
        logger.error(f"{label}: {err_msg}")
        return TransactionSendResult(success=False, signature=sig_str, error_message=err_msg,
                                     error_type="ConfirmError", raw_error=e)

    if status is None:
        err_msg = f"Tx {sig_str} confirmation timed out."
        logger.warning(f"{label}: {err_msg}")
        return TransactionSendResult(success=False, signature=sig_str,
                                     error_message=err_msg, error_type="ConfirmTimeout")
    if status.err is not None:
        logger.error(f"{label}: Tx {sig_str} failed on chain: {status.err}")
        return TransactionSendResult(success=False, signature=sig_str,
                                     error_message=str(status.err), error_type="TxError",
                                     raw_error=status.err)
    logger.info(f"{label}: CONFIRMED. Sig: {sig_str}")
    return TransactionSendResult(success=True, signature=sig_str)
