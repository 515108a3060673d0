# token_swap/cli.py

import argparse
import asyncio
import os
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from solana.rpc.commitment import Commitment
from solders.pubkey import Pubkey

from token_swap import config as default_config
from token_swap.core.client import SolanaClient
from token_swap.core.exceptions import TokenSwapError
from token_swap.core.layouts import TOKEN_SWAP_ACCOUNT_SIZE
from token_swap.core.pool_state import PoolState
from token_swap.core.swap_pool import TokenSwap
from token_swap.core.wallet import Wallet
from token_swap.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

OPTIONAL_DEFAULTS = {
    "COMMITMENT": "confirmed",
    "CONFIRM_TIMEOUT_SECONDS": 60,
    "MAX_SEND_RETRIES": 3,
    "RETRY_DELAY_SECONDS": 2.0,
    "SKIP_PREFLIGHT": False,
}


def _coerce(raw: Any, default: Any) -> Any:
    if isinstance(default, bool) and isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return type(default)(raw)


def load_config(cfg_mod=default_config) -> Dict[str, Any]:
    """Collects settings from the config module, with environment variables taking precedence."""
    config: Dict[str, Any] = {}
    for var in ("SOLANA_NODE_RPC_ENDPOINT", "TOKEN_SWAP_PROGRAM_ID"):
        val = os.getenv(var) or getattr(cfg_mod, var, None)
        if not val:
            raise ValueError(f"Missing required config var: {var}")
        config[var] = val
    config["SOLANA_PRIVATE_KEY"] = os.getenv("SOLANA_PRIVATE_KEY") or getattr(cfg_mod, "SOLANA_PRIVATE_KEY", None)
    config["SOLANA_KEYPAIR_PATH"] = os.getenv("SOLANA_KEYPAIR_PATH") or getattr(cfg_mod, "SOLANA_KEYPAIR_PATH", None)

    for var, default in OPTIONAL_DEFAULTS.items():
        raw = os.getenv(var)
        if raw is None:
            raw = getattr(cfg_mod, var, None)
        if raw is None:
            config[var] = default
            continue
        try:
            config[var] = _coerce(raw, default)
        except (TypeError, ValueError):
            logger.warning(f"Config warning: invalid value for {var}, using default {default}")
            config[var] = default

    logger.debug("Configuration loaded.")
    return config


def format_pool_state(state: PoolState) -> str:
    lines = [
        f"Token swap:        {state.address}",
        f"Authority:         {state.authority}",
        f"Version:           {state.version}",
        f"Nonce:             {state.nonce}",
        f"Curve type:        {state.curve_type.name} ({int(state.curve_type)})",
        f"Token program:     {state.token_program_id}",
        f"Token account A:   {state.token_account_a}",
        f"Token account B:   {state.token_account_b}",
        f"Mint A:            {state.mint_a}",
        f"Mint B:            {state.mint_b}",
        f"Pool token mint:   {state.pool_token_mint}",
        f"Fee account:       {state.fee_account}",
        f"Trade fee:         {state.trade_fee_numerator}/{state.trade_fee_denominator}",
        f"Owner trade fee:   {state.owner_trade_fee_numerator}/{state.owner_trade_fee_denominator}",
        f"Owner withdraw fee:{state.owner_withdraw_fee_numerator}/{state.owner_withdraw_fee_denominator}",
        f"Host fee:          {state.host_fee_numerator}/{state.host_fee_denominator}",
        f"Curve parameters:  {state.curve_parameters.hex()}",
    ]
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="token-swap", description="Token swap program client")
    parser.add_argument("--rpc", help="Override SOLANA_NODE_RPC_ENDPOINT")
    parser.add_argument("--program-id", help="Override TOKEN_SWAP_PROGRAM_ID")
    sub = parser.add_subparsers(dest="command", required=True)

    pool = sub.add_parser("pool", help="Fetch and decode a swap account")
    pool.add_argument("address")

    sub.add_parser("rent", help="Lamports needed for a rent-exempt swap account")

    swap = sub.add_parser("swap", help="Swap tokens through a pool")
    swap.add_argument("address")
    swap.add_argument("--user-source", required=True)
    swap.add_argument("--user-destination", required=True)
    swap.add_argument("--pool-source", required=True)
    swap.add_argument("--pool-destination", required=True)
    swap.add_argument("--amount-in", required=True)
    swap.add_argument("--minimum-amount-out", default="0")
    swap.add_argument("--host-fee-account")

    deposit = sub.add_parser("deposit", help="Deposit both token types")
    deposit.add_argument("address")
    deposit.add_argument("--user-account-a", required=True)
    deposit.add_argument("--user-account-b", required=True)
    deposit.add_argument("--pool-account", required=True)
    deposit.add_argument("--pool-token-amount", required=True)
    deposit.add_argument("--maximum-token-a", required=True)
    deposit.add_argument("--maximum-token-b", required=True)

    withdraw = sub.add_parser("withdraw", help="Withdraw both token types")
    withdraw.add_argument("address")
    withdraw.add_argument("--user-account-a", required=True)
    withdraw.add_argument("--user-account-b", required=True)
    withdraw.add_argument("--pool-account", required=True)
    withdraw.add_argument("--pool-token-amount", required=True)
    withdraw.add_argument("--minimum-token-a", default="0")
    withdraw.add_argument("--minimum-token-b", default="0")

    deposit_single = sub.add_parser("deposit-single", help="Deposit one token type for an exact amount in")
    deposit_single.add_argument("address")
    deposit_single.add_argument("--user-account", required=True)
    deposit_single.add_argument("--pool-account", required=True)
    deposit_single.add_argument("--source-token-amount", required=True)
    deposit_single.add_argument("--minimum-pool-token-amount", default="0")

    withdraw_single = sub.add_parser("withdraw-single", help="Withdraw one token type for an exact amount out")
    withdraw_single.add_argument("address")
    withdraw_single.add_argument("--user-account", required=True)
    withdraw_single.add_argument("--pool-account", required=True)
    withdraw_single.add_argument("--destination-token-amount", required=True)
    withdraw_single.add_argument("--maximum-pool-token-amount", required=True)
    return parser


def _pk(value: Optional[str]) -> Optional[Pubkey]:
    return Pubkey.from_string(value) if value else None


def _load_wallet(cfg: Dict[str, Any]) -> Wallet:
    if cfg.get("SOLANA_PRIVATE_KEY"):
        return Wallet.from_base58(cfg["SOLANA_PRIVATE_KEY"])
    if cfg.get("SOLANA_KEYPAIR_PATH"):
        return Wallet.from_keypair_file(cfg["SOLANA_KEYPAIR_PATH"])
    raise ValueError("SOLANA_PRIVATE_KEY or SOLANA_KEYPAIR_PATH is required for this command")


async def run_command(args: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    program_id = Pubkey.from_string(cfg["TOKEN_SWAP_PROGRAM_ID"])
    client = SolanaClient(
        cfg["SOLANA_NODE_RPC_ENDPOINT"],
        commitment=Commitment(cfg["COMMITMENT"]),
        timeout_seconds=cfg["CONFIRM_TIMEOUT_SECONDS"],
        max_retries=cfg["MAX_SEND_RETRIES"],
        retry_delay_seconds=cfg["RETRY_DELAY_SECONDS"],
        skip_preflight=cfg["SKIP_PREFLIGHT"],
    )
    async with client:
        if args.command == "rent":
            lamports = await TokenSwap.get_min_balance_rent_for_exempt_token_swap(client)
            print(f"{lamports} lamports for {TOKEN_SWAP_ACCOUNT_SIZE} bytes")
            return 0

        if args.command == "pool":
            pool = await TokenSwap.load(client, Pubkey.from_string(args.address), program_id)
            print(format_pool_state(pool.state))
            return 0

        wallet = _load_wallet(cfg)
        pool = await TokenSwap.load(client, Pubkey.from_string(args.address), program_id, wallet.keypair)

        if args.command == "swap":
            sig = await pool.swap(
                user_source=_pk(args.user_source),
                pool_source=_pk(args.pool_source),
                pool_destination=_pk(args.pool_destination),
                user_destination=_pk(args.user_destination),
                host_fee_account=_pk(args.host_fee_account),
                user_transfer_authority=wallet.keypair,
                amount_in=int(args.amount_in),
                minimum_amount_out=int(args.minimum_amount_out),
            )
        elif args.command == "deposit":
            sig = await pool.deposit_all_token_types(
                user_account_a=_pk(args.user_account_a),
                user_account_b=_pk(args.user_account_b),
                pool_account=_pk(args.pool_account),
                user_transfer_authority=wallet.keypair,
                pool_token_amount=int(args.pool_token_amount),
                maximum_token_a=int(args.maximum_token_a),
                maximum_token_b=int(args.maximum_token_b),
            )
        elif args.command == "withdraw":
            sig = await pool.withdraw_all_token_types(
                user_account_a=_pk(args.user_account_a),
                user_account_b=_pk(args.user_account_b),
                pool_account=_pk(args.pool_account),
                user_transfer_authority=wallet.keypair,
                pool_token_amount=int(args.pool_token_amount),
                minimum_token_a=int(args.minimum_token_a),
                minimum_token_b=int(args.minimum_token_b),
            )
        elif args.command == "deposit-single":
            sig = await pool.deposit_single_token_type_exact_amount_in(
                user_account=_pk(args.user_account),
                pool_account=_pk(args.pool_account),
                user_transfer_authority=wallet.keypair,
                source_token_amount=int(args.source_token_amount),
                minimum_pool_token_amount=int(args.minimum_pool_token_amount),
            )
        else:
            sig = await pool.withdraw_single_token_type_exact_amount_out(
                user_account=_pk(args.user_account),
                pool_account=_pk(args.pool_account),
                user_transfer_authority=wallet.keypair,
                destination_token_amount=int(args.destination_token_amount),
                maximum_pool_token_amount=int(args.maximum_pool_token_amount),
            )
        print(sig)
        return 0


def main(argv=None) -> int:
    load_dotenv()
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config()
    except ValueError as e:
        logger.critical(f"Config load failed: {e}")
        return 1
    if args.rpc:
        cfg["SOLANA_NODE_RPC_ENDPOINT"] = args.rpc
    if args.program_id:
        cfg["TOKEN_SWAP_PROGRAM_ID"] = args.program_id

    try:
        return asyncio.run(run_command(args, cfg))
    except (TokenSwapError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Cancelled.")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
