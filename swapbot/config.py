# swapbot/config.py
"""
Swap Configuration
Single Uniswap swap on Optimism, routed by the Uniswap Routing API
"""

import os
from dotenv import load_dotenv
from pathlib import Path
from decimal import Decimal

# -----------------------------
# Load .env if present
# -----------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / "config" / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


def require_env(name: str) -> str:
    """Read a mandatory environment variable"""
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} not set in environment or {ENV_PATH}")
    return value


# -----------------------------
# Chain Configuration
# -----------------------------
CHAIN_ID = int(os.getenv("CHAIN_ID", "10"))  # Optimism

OPTIMISM_NODE_URL = os.getenv("OPTIMISM_NODE_URL", "https://mainnet.optimism.io")

# -----------------------------
# Contracts
# -----------------------------
# Uniswap SwapRouter02 (same address on mainnet, Optimism, Arbitrum, Polygon)
UNI_V3_SWAP_ROUTER_ADDRESS = os.getenv(
    "UNI_V3_SWAP_ROUTER_ADDRESS",
    "0x68b3465833fb72A70ecDF485E0e4C7bD8665Fc45",
)

# -----------------------------
# Routing Service
# -----------------------------
ROUTING_API_URL = os.getenv("ROUTING_API_URL", "https://api.uniswap.org/v1/quote")
ROUTING_HTTP_TIMEOUT = float(os.getenv("ROUTING_HTTP_TIMEOUT", "30"))
ROUTING_API_HEADERS = {
    "origin": "https://app.uniswap.org",
    "accept": "application/json",
}

# -----------------------------
# Swap Parameters
# -----------------------------
SLIPPAGE_TOLERANCE = Decimal(1) / Decimal(1000)  # 0.1%
DEADLINE_SECONDS = 1800                           # 30 minutes
MAX_SWAPS_PER_PATH = 1                            # single-hop only

# -----------------------------
# Gas Configuration
# -----------------------------
# The route's own estimate is often too low for complex swaps
GAS_LIMIT_SWAP = 800_000
GAS_LIMIT_APPROVAL = 60_000

# -----------------------------
# Logging & Deployment Mode
# -----------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
DRY_RUN_MODE = os.getenv("DRY_RUN_MODE", "false").lower() in ("1", "true", "yes")
