# swapbot/routing.py
"""
Routing oracle client
Asks the Uniswap Routing API for an optimal route and the encoded router call.

Usage:
    client = RoutingClient(chain_id=10)
    route = client.route(amount_in, token_in, token_out, TradeType.EXACT_INPUT, options)
    if route is None:
        ...  # no route for this pair / size
"""

import time
import logging
from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum

import requests

from swapbot.config import (
    ROUTING_API_URL, ROUTING_API_HEADERS, ROUTING_HTTP_TIMEOUT,
)
from swapbot.tokens import Token, format_units

logger = logging.getLogger(__name__)

NO_ROUTE_ERROR_CODES = {"NO_ROUTE", "NO_ROUTES_FOUND"}


# =============================================================================
# ENUMS & DATA CLASSES
# =============================================================================

class TradeType(Enum):
    EXACT_INPUT = "exactIn"
    EXACT_OUTPUT = "exactOut"


@dataclass(frozen=True)
class RouteOptions:
    """Swap options forwarded to the routing service"""
    recipient: str
    slippage_tolerance: Decimal   # fraction, 0.001 == 0.1%
    deadline: int                 # unix timestamp
    max_swaps_per_path: Optional[int] = None


@dataclass(frozen=True)
class MethodParameters:
    """Encoded router call"""
    calldata: str
    value: int
    to: Optional[str] = None


@dataclass
class Route:
    """Route quote returned by the routing service"""
    quote: Decimal
    quote_gas_adjusted: Decimal
    estimated_gas_used_quote_token: Decimal
    estimated_gas_used_usd: Decimal
    estimated_gas_used: int
    gas_price_wei: int
    method_parameters: Optional[MethodParameters]
    route_string: str = ""

    @classmethod
    def from_response(cls, payload: Dict[str, Any], quote_token: Token) -> "Route":
        params = payload.get("methodParameters")
        method_parameters = None
        if params and params.get("calldata"):
            method_parameters = MethodParameters(
                calldata=params["calldata"],
                value=_to_int(params.get("value", 0)),
                to=params.get("to"),
            )

        return cls(
            quote=_to_decimal(payload, "quoteDecimals", "quote", quote_token.decimals),
            quote_gas_adjusted=_to_decimal(
                payload, "quoteGasAdjustedDecimals", "quoteGasAdjusted", quote_token.decimals
            ),
            estimated_gas_used_quote_token=_to_decimal(
                payload, "gasUseEstimateQuoteDecimals", "gasUseEstimateQuote", quote_token.decimals
            ),
            estimated_gas_used_usd=Decimal(str(payload.get("gasUseEstimateUSD", "0"))),
            estimated_gas_used=_to_int(payload.get("gasUseEstimate", 0)),
            gas_price_wei=_to_int(payload.get("gasPriceWei", 0)),
            method_parameters=method_parameters,
            route_string=payload.get("routeString", ""),
        )


def _to_int(value) -> int:
    if isinstance(value, str):
        value = value.strip()
        if value[:2].lower() == "0x":
            return int(value, 16)
        return int(value)
    return int(value)


def _to_decimal(payload: Dict[str, Any], human_key: str, raw_key: str, decimals: int) -> Decimal:
    if payload.get(human_key) is not None:
        return Decimal(str(payload[human_key]))
    return Decimal(format_units(_to_int(payload.get(raw_key, 0)), decimals))


# =============================================================================
# CLIENT
# =============================================================================

class RoutingClient:
    """
    Thin client over the routing HTTP API.
    A missing route is reported as None; every other failure raises.
    """

    def __init__(
        self,
        chain_id: int,
        base_url: str = ROUTING_API_URL,
        timeout: float = ROUTING_HTTP_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.chain_id = chain_id
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(ROUTING_API_HEADERS if headers is None else headers)

    def build_params(
        self,
        amount: int,
        amount_token: Token,
        quote_token: Token,
        trade_type: TradeType,
        options: RouteOptions,
    ) -> Dict[str, Any]:
        if trade_type is TradeType.EXACT_INPUT:
            token_in, token_out = amount_token, quote_token
        else:
            token_in, token_out = quote_token, amount_token

        slippage_pct = (options.slippage_tolerance * 100).normalize()

        params = {
            "tokenInAddress": token_in.address,
            "tokenInChainId": token_in.chain_id,
            "tokenOutAddress": token_out.address,
            "tokenOutChainId": token_out.chain_id,
            "amount": str(amount),
            "type": trade_type.value,
            "recipient": options.recipient,
            "slippageTolerance": format(slippage_pct, "f"),
            "deadline": str(max(options.deadline - int(time.time()), 0)),
            "algorithm": "alpha",
        }
        if options.max_swaps_per_path is not None:
            params["maxSwapsPerPath"] = options.max_swaps_per_path
        return params

    def route(
        self,
        amount: int,
        amount_token: Token,
        quote_token: Token,
        trade_type: TradeType,
        options: RouteOptions,
    ) -> Optional[Route]:
        """
        Request a route for `amount` raw units of `amount_token`.
        Quote amounts in the result are denominated in `quote_token`.
        """
        params = self.build_params(amount, amount_token, quote_token, trade_type, options)
        logger.debug(f"Routing request: {params}")

        resp = requests.get(
            self.base_url,
            params=params,
            headers=self.headers,
            timeout=self.timeout,
        )

        if self._is_no_route(resp):
            logger.warning(f"No route: {resp.status_code} {resp.text[:200]}")
            return None

        resp.raise_for_status()
        return Route.from_response(resp.json(), quote_token)

    @staticmethod
    def _is_no_route(resp) -> bool:
        if resp.status_code == 404:
            return True
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                return False
            return isinstance(body, dict) and body.get("errorCode") in NO_ROUTE_ERROR_CODES
        return False
