# token_swap/config.py

import os
from dotenv import load_dotenv

# Load .env from the project root
script_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(script_dir)
dotenv_path = os.path.join(project_root, '.env')
load_dotenv(dotenv_path=dotenv_path)

# --- Solana Node Connection ---
SOLANA_NODE_RPC_ENDPOINT = os.getenv("SOLANA_NODE_RPC_ENDPOINT", "https://api.mainnet-beta.solana.com")
# Private RPC providers are strongly recommended for anything beyond reads

# --- Wallet (required for state-changing commands) ---
SOLANA_PRIVATE_KEY = os.getenv("SOLANA_PRIVATE_KEY")
# Alternatively, a solana-keygen JSON file
SOLANA_KEYPAIR_PATH = os.getenv("SOLANA_KEYPAIR_PATH")

# --- Token Swap Program ---
TOKEN_SWAP_PROGRAM_ID = os.getenv("TOKEN_SWAP_PROGRAM_ID", "SwaPpA9LAaLfeLi3a68M4DjnLqgtticKg6CnyNwgAC8")

# --- Transaction Settings ---
COMMITMENT = os.getenv("COMMITMENT", "confirmed")  # processed | confirmed | finalized
CONFIRM_TIMEOUT_SECONDS = 60
MAX_SEND_RETRIES = 3
RETRY_DELAY_SECONDS = 2.0
SKIP_PREFLIGHT = False
