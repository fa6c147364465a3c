# swapbot/main.py
"""
Single Uniswap swap

THIS IS THE ENTRY POINT - Run with:
    python -m swapbot.main TOKEN_IN TOKEN_OUT AMOUNT [--dry-run] [--approve]
"""

import sys
import logging
from datetime import datetime
from pathlib import Path

from web3 import Web3
from eth_account import Account

from swapbot.config import (
    OPTIMISM_NODE_URL, CHAIN_ID, UNI_V3_SWAP_ROUTER_ADDRESS,
    LOG_LEVEL, DRY_RUN_MODE, require_env,
)
from swapbot.routing import RoutingClient
from swapbot.executor import SwapExecutor, SwapError

LOG_DIR = Path(__file__).parent.parent / "logs"

logger = logging.getLogger(__name__)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(level: str = LOG_LEVEL) -> None:
    LOG_DIR.mkdir(exist_ok=True)
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_DIR / f"swap_{datetime.now().strftime('%Y%m%d')}.log"),
        ]
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def parse_args(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Swap one token for another on Uniswap")
    parser.add_argument("token_in", help="Input token address")
    parser.add_argument("token_out", help="Output token address")
    parser.add_argument("amount", help="Amount of input token, in human units (e.g. 1.5)")
    parser.add_argument("--chain-id", type=int, default=CHAIN_ID, help=f"Chain ID (default: {CHAIN_ID})")
    parser.add_argument("--rpc-url", default=OPTIMISM_NODE_URL, help="JSON-RPC node URL")
    parser.add_argument("--router", default=UNI_V3_SWAP_ROUTER_ADDRESS, help="Swap router address")
    parser.add_argument(
        "--approve",
        action="store_true",
        help="Approve the router for the input amount if the allowance is too low",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=DRY_RUN_MODE,
        help="Load balances and route, but do not send any transaction",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    setup_logging()

    account = Account.from_key(require_env("PRIVATE_KEY"))

    logger.info(f"Connecting to RPC: {args.rpc_url}")
    w3 = Web3(Web3.HTTPProvider(args.rpc_url))
    if not w3.is_connected():
        raise RuntimeError(f"RPC not connected: {args.rpc_url}")

    executor = SwapExecutor(
        w3,
        account,
        chain_id=args.chain_id,
        router=RoutingClient(chain_id=args.chain_id),
        router_address=args.router,
    )

    try:
        executor.swap(
            args.token_in,
            args.token_out,
            args.amount,
            approve=args.approve,
            dry_run=args.dry_run,
        )
    except SwapError as e:
        logger.error(f"❌ Swap failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
