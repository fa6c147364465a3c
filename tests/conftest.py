from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from web3 import Web3

from swapbot.routing import MethodParameters, Route

WALLET = Web3.to_checksum_address("0x" + "ee" * 20)
TOKEN_IN = Web3.to_checksum_address("0x" + "a1" * 20)
TOKEN_OUT = Web3.to_checksum_address("0x" + "b2" * 20)


class _Call:
    def __init__(self, fn) -> None:
        self._fn = fn

    def call(self) -> Any:
        return self._fn()


class _Functions:
    def __init__(self, contract: "FakeContract") -> None:
        self._c = contract

    def decimals(self) -> _Call:
        return _Call(lambda: self._c.decimals)

    def symbol(self) -> _Call:
        return _Call(lambda: self._c.symbol)

    def name(self) -> _Call:
        return _Call(lambda: self._c.name)

    def balanceOf(self, owner: str) -> _Call:  # noqa: N802
        self._c.balance_queries.append(owner)
        return _Call(self._c.next_balance)

    def allowance(self, owner: str, spender: str) -> _Call:  # noqa: ARG002
        return _Call(lambda: self._c.allowance)

    def approve(self, spender: str, amount: int) -> SimpleNamespace:
        def _build(params: Dict[str, Any]) -> Dict[str, Any]:
            self._c.approvals.append((spender, amount))
            return dict(params, to=self._c.address, data="0x095ea7b3", value=0)

        return SimpleNamespace(build_transaction=_build)


class FakeContract:
    """ERC-20 stand-in; balances are served in order, the last one repeats."""

    def __init__(
        self,
        address: str,
        decimals: int,
        symbol: str,
        name: str,
        balances: List[int],
        allowance: int = 0,
    ) -> None:
        self.address = address
        self.decimals = decimals
        self.symbol = symbol
        self.name = name
        self.allowance = allowance
        self._balances = list(balances)
        self.balance_queries: List[str] = []
        self.approvals: List[tuple] = []
        self.functions = _Functions(self)

    def next_balance(self) -> int:
        if len(self._balances) > 1:
            return self._balances.pop(0)
        return self._balances[0]


class FakeEth:
    def __init__(self, contracts: List[FakeContract], statuses: Optional[List[int]] = None) -> None:
        self.contracts = {c.address: c for c in contracts}
        self.statuses = list(statuses or [])
        self.sent: List[bytes] = []
        self.gas_price = 2_000_000

    def contract(self, address: str, abi: Any) -> FakeContract:  # noqa: ARG002
        return self.contracts[address]

    def get_transaction_count(self, address: str, block: str) -> int:  # noqa: ARG002
        return 7 + len(self.sent)

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.sent.append(raw)
        return bytes([len(self.sent)]) * 32

    def wait_for_transaction_receipt(self, tx_hash: bytes) -> SimpleNamespace:  # noqa: ARG002
        status = self.statuses.pop(0) if self.statuses else 1
        return SimpleNamespace(status=status, gasUsed=180_000)


class FakeAccount:
    address = WALLET

    def __init__(self) -> None:
        self.signed: List[Dict[str, Any]] = []

    def sign_transaction(self, tx: Dict[str, Any]) -> SimpleNamespace:
        self.signed.append(tx)
        return SimpleNamespace(raw_transaction=b"signed-%d" % len(self.signed))


class FakeRouter:
    def __init__(self, route: Optional[Route]) -> None:
        self._route = route
        self.calls: List[SimpleNamespace] = []

    def route(self, amount, amount_token, quote_token, trade_type, options):
        self.calls.append(
            SimpleNamespace(
                amount=amount,
                amount_token=amount_token,
                quote_token=quote_token,
                trade_type=trade_type,
                options=options,
            )
        )
        return self._route


def make_route(
    calldata: str = "0x5ae401dc00ff",
    value: int = 0,
    gas_price_wei: int = 1_000_000,
    estimated_gas_used: int = 150_000,
    with_params: bool = True,
) -> Route:
    return Route(
        quote=Decimal("2.5"),
        quote_gas_adjusted=Decimal("2.49"),
        estimated_gas_used_quote_token=Decimal("0.01"),
        estimated_gas_used_usd=Decimal("0.02"),
        estimated_gas_used=estimated_gas_used,
        gas_price_wei=gas_price_wei,
        method_parameters=MethodParameters(calldata=calldata, value=value) if with_params else None,
        route_string="[V3] 100.00% = USDC -- 0.05% [0xpool] --> WETH",
    )


@pytest.fixture
def contract_in() -> FakeContract:
    return FakeContract(TOKEN_IN, 6, "USDC", "USD Coin", balances=[5_000_000, 3_500_000], allowance=10**12)


@pytest.fixture
def contract_out() -> FakeContract:
    return FakeContract(TOKEN_OUT, 18, "WETH", "Wrapped Ether", balances=[10**17, 10**17 + 5 * 10**14])


@pytest.fixture
def account() -> FakeAccount:
    return FakeAccount()


@pytest.fixture
def w3(contract_in: FakeContract, contract_out: FakeContract) -> SimpleNamespace:
    return SimpleNamespace(eth=FakeEth([contract_in, contract_out]))
