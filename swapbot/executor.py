# swapbot/executor.py
"""
Single-swap execution
Loads both tokens, asks the routing service for a route, signs and sends the
router call, then reports updated balances.
"""

import time
import logging
from web3 import Web3
from dataclasses import dataclass
from typing import Optional

from swapbot.config import (
    CHAIN_ID, UNI_V3_SWAP_ROUTER_ADDRESS,
    SLIPPAGE_TOLERANCE, DEADLINE_SECONDS, MAX_SWAPS_PER_PATH,
    GAS_LIMIT_SWAP, GAS_LIMIT_APPROVAL,
)
from swapbot.tokens import (
    Token, erc20_contract, get_token_and_balance, fetch_balances, parse_units,
)
from swapbot.routing import Route, RouteOptions, RoutingClient, TradeType

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS & DATA CLASSES
# =============================================================================

class SwapError(Exception):
    """Base class for swap failures"""


class NoRouteError(SwapError):
    """Routing service returned no usable route"""


class SwapTransactionFailed(SwapError):
    """Transaction was mined with a failure status"""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


@dataclass
class SwapResult:
    """Outcome of one swap"""
    token_in: Token
    token_out: Token
    amount_in: int
    balance_in_before: int
    balance_out_before: int
    tx_hash: Optional[str] = None
    gas_used: int = 0
    balance_in_after: Optional[int] = None
    balance_out_after: Optional[int] = None

    @property
    def executed(self) -> bool:
        return self.tx_hash is not None


# =============================================================================
# TRANSACTION BUILDING
# =============================================================================

def build_swap_transaction(
    route: Optional[Route],
    wallet_address: str,
    router_address: str = UNI_V3_SWAP_ROUTER_ADDRESS,
    gas_limit: int = GAS_LIMIT_SWAP,
) -> dict:
    """
    Turn a route into an unsigned router call.
    The gas limit is fixed; the route's own estimate is only logged.
    """
    if route is None or route.method_parameters is None:
        raise NoRouteError("No route loaded")

    params = route.method_parameters
    return {
        "data": params.calldata,
        "to": Web3.to_checksum_address(router_address),
        "value": int(params.value),
        "from": wallet_address,
        "gasPrice": int(route.gas_price_wei),
        "gas": gas_limit,
    }


def log_route(route: Route, token_out: Token) -> None:
    logger.info(f"   You'll get {route.quote} of {token_out.symbol}")
    logger.info(f"   Gas Adjusted Quote: {route.quote_gas_adjusted}")
    logger.info(f"   Gas Used Quote Token: {route.estimated_gas_used_quote_token}")
    logger.info(f"   Gas Used USD: {route.estimated_gas_used_usd}")
    logger.info(f"   Gas Used: {route.estimated_gas_used}")
    logger.info(f"   Gas Price Wei: {route.gas_price_wei}")
    if route.route_string:
        logger.info(f"   Route: {route.route_string}")


# =============================================================================
# EXECUTOR
# =============================================================================

class SwapExecutor:
    """
    Performs one exact-input swap through the Uniswap swap router.

    Steps:
    1. Token metadata and balances (parallel reads)
    2. Route request (slippage 0.1%, 30 min deadline, single hop)
    3. Optional allowance top-up
    4. Sign, send, wait for receipt
    5. Balances after the swap
    """

    def __init__(
        self,
        w3: Web3,
        account,
        chain_id: int = CHAIN_ID,
        router: Optional[RoutingClient] = None,
        router_address: str = UNI_V3_SWAP_ROUTER_ADDRESS,
    ):
        self.w3 = w3
        self.account = account
        self.address = account.address
        self.chain_id = chain_id
        self.router = router or RoutingClient(chain_id=chain_id)
        self.router_address = Web3.to_checksum_address(router_address)

    def _get_nonce(self) -> int:
        return self.w3.eth.get_transaction_count(self.address, "pending")

    def _send(self, tx: dict):
        tx = dict(tx, nonce=self._get_nonce(), chainId=self.chain_id)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info(f"Transaction sent: {Web3.to_hex(tx_hash)}")
        return tx_hash

    def _wait(self, tx_hash, label: str):
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt.status == 0:
            raise SwapTransactionFailed(f"{label} transaction failed", Web3.to_hex(tx_hash))
        return receipt

    def ensure_allowance(self, contract, token: Token, amount: int) -> Optional[str]:
        """
        Approve the swap router for `amount` if the current allowance is short.
        Returns the approval tx hash, or None when no approval was needed.
        """
        current = contract.functions.allowance(self.address, self.router_address).call()
        if current >= amount:
            logger.info(f"Allowance OK: {token.format(current)} {token.symbol}")
            return None

        logger.info(f"Approving {token.format(amount)} {token.symbol} for {self.router_address}...")
        tx = contract.functions.approve(self.router_address, amount).build_transaction({
            "from": self.address,
            "gas": GAS_LIMIT_APPROVAL,
            "gasPrice": self.w3.eth.gas_price,
        })
        tx_hash = self._send(tx)
        self._wait(tx_hash, "Approval")
        return Web3.to_hex(tx_hash)

    def swap(
        self,
        token_in_address: str,
        token_out_address: str,
        amount: str,
        approve: bool = False,
        dry_run: bool = False,
    ) -> SwapResult:
        # Step 1: Token metadata and balances
        logger.info("Connecting to blockchain, loading token balances...")

        contract_in = erc20_contract(self.w3, token_in_address)
        contract_out = erc20_contract(self.w3, token_out_address)

        token_in, balance_in = get_token_and_balance(self.chain_id, contract_in, self.address)
        token_out, balance_out = get_token_and_balance(self.chain_id, contract_out, self.address)

        logger.info(f"Wallet {self.address} balances:")
        logger.info(f"   Input: {token_in}: {token_in.format(balance_in)}")
        logger.info(f"   Output: {token_out}: {token_out.format(balance_out)}")

        amount_in = parse_units(amount, token_in.decimals)

        result = SwapResult(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            balance_in_before=balance_in,
            balance_out_before=balance_out,
        )

        # Step 2: Route
        logger.info("Loading a swap route...")

        route = self.router.route(
            amount_in,
            token_in,
            token_out,
            TradeType.EXACT_INPUT,
            RouteOptions(
                recipient=self.address,
                slippage_tolerance=SLIPPAGE_TOLERANCE,
                deadline=int(time.time()) + DEADLINE_SECONDS,
                max_swaps_per_path=MAX_SWAPS_PER_PATH,
            ),
        )

        tx = build_swap_transaction(route, self.address, self.router_address)
        log_route(route, token_out)

        if dry_run:
            logger.info(f"DRY RUN - not sending swap: {tx}")
            return result

        if approve:
            self.ensure_allowance(contract_in, token_in, amount_in)

        # Step 3: Send swap
        logger.info("Making a swap...")
        tx_hash = self._send(tx)
        receipt = self._wait(tx_hash, "Swap")

        result.tx_hash = Web3.to_hex(tx_hash)
        result.gas_used = receipt.gasUsed

        # Step 4: Balances after swap
        result.balance_in_after, result.balance_out_after = fetch_balances(
            [contract_in, contract_out], self.address
        )

        logger.info("✅ Swap completed successfully!")
        logger.info("Updated balances:")
        logger.info(f"   {token_in.symbol}: {token_in.format(result.balance_in_after)}")
        logger.info(f"   {token_out.symbol}: {token_out.format(result.balance_out_after)}")

        return result


def swap_on_uniswap(
    account,
    chain_id: int,
    token_in: str,
    token_out: str,
    amount: str,
    *,
    w3: Web3,
    router: Optional[RoutingClient] = None,
    approve: bool = False,
    dry_run: bool = False,
) -> SwapResult:
    """Run one exact-input swap of `amount` token_in for token_out"""
    executor = SwapExecutor(w3, account, chain_id=chain_id, router=router)
    return executor.swap(token_in, token_out, amount, approve=approve, dry_run=dry_run)
