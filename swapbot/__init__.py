"""
Uniswap Swap Bot
Performs one routed token swap per invocation

Modules:
- config: Configuration and environment
- tokens: ERC-20 metadata, balances and unit conversion
- routing: Routing service client
- executor: Swap execution
- main: Entry point
"""

__version__ = "1.0.0"

from swapbot.config import (
    CHAIN_ID,
    UNI_V3_SWAP_ROUTER_ADDRESS,
    DRY_RUN_MODE,
)

from swapbot.executor import (
    SwapError,
    NoRouteError,
    SwapTransactionFailed,
    SwapResult,
    swap_on_uniswap,
)

__all__ = [
    "CHAIN_ID",
    "UNI_V3_SWAP_ROUTER_ADDRESS",
    "DRY_RUN_MODE",
    "SwapError",
    "NoRouteError",
    "SwapTransactionFailed",
    "SwapResult",
    "swap_on_uniswap",
]
