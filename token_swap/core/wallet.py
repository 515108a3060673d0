# token_swap/core/wallet.py

import json

import base58
from solders.keypair import Keypair

from ..utils.logger import get_logger

logger = get_logger(__name__)


class Wallet:
    """Payer and default transfer authority for pool operations."""

    def __init__(self, keypair: Keypair):
        self.keypair = keypair
        self.pubkey = keypair.pubkey()
        logger.info(f"Wallet initialized for pubkey: {self.pubkey}")

    @classmethod
    def from_base58(cls, private_key_bs58: str) -> "Wallet":
        try:
            return cls(Keypair.from_bytes(base58.b58decode(private_key_bs58.strip())))
        except ValueError as e:
            logger.error(f"Invalid base58 private key provided: {e}")
            raise ValueError("Invalid private key format") from e

    @classmethod
    def from_keypair_file(cls, path: str) -> "Wallet":
        """Loads a solana-keygen JSON file (a list of 64 byte values)."""
        with open(path, "r") as f:
            secret = json.load(f)
        try:
            return cls(Keypair.from_bytes(bytes(secret)))
        except (TypeError, ValueError) as e:
            logger.error(f"Could not load keypair from {path}: {e}")
            raise ValueError(f"Invalid keypair file: {path}") from e
