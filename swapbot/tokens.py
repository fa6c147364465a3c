# swapbot/tokens.py
"""
ERC-20 token metadata and balances
Reads are fanned out across a thread pool and gathered in call order
"""

from web3 import Web3
from decimal import Decimal, InvalidOperation, localcontext
from dataclasses import dataclass
from typing import List, Tuple
from concurrent.futures import ThreadPoolExecutor

# =============================================================================
# ERC-20 ABI
# =============================================================================

ERC20_ABI = [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "symbol",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "name",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Token:
    """On-chain ERC-20 token"""
    chain_id: int
    address: str
    decimals: int
    symbol: str
    name: str

    def format(self, raw: int) -> str:
        return format_units(raw, self.decimals)

    def __str__(self) -> str:
        return f"{self.symbol} ({self.name})"


# =============================================================================
# UNIT CONVERSION
# =============================================================================

def _scale(value: Decimal, exponent: int) -> Decimal:
    # decimal context is thread-local; precision must cover every digit
    with localcontext() as ctx:
        ctx.prec = max(80, len(value.as_tuple().digits))
        return value.scaleb(exponent)


def parse_units(amount: str, decimals: int) -> int:
    """
    Convert a human amount ("1.5") to raw token units.
    Raises ValueError on malformed, negative or over-precise input.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount!r}")

    raw = _scale(value, decimals)
    if raw != raw.to_integral_value():
        raise ValueError(
            f"Amount {amount!r} has more than {decimals} fractional digits"
        )
    return int(raw)


def format_units(raw: int, decimals: int) -> str:
    """Convert raw token units to a plain decimal string, e.g. 1500000, 6 -> "1.5" """
    text = format(_scale(Decimal(int(raw)), -decimals), "f")
    if "." not in text:
        return text + ".0"
    text = text.rstrip("0")
    if text.endswith("."):
        text += "0"
    return text


# =============================================================================
# CONTRACT READS
# =============================================================================

def erc20_contract(w3: Web3, address: str):
    return w3.eth.contract(
        address=Web3.to_checksum_address(address),
        abi=ERC20_ABI,
    )


def get_token_and_balance(
    chain_id: int,
    contract,
    wallet_address: str,
) -> Tuple[Token, int]:
    """
    Fetch decimals, symbol, name and the wallet balance in parallel.
    Any failing call propagates.
    """
    fns = contract.functions
    with ThreadPoolExecutor(max_workers=4) as executor:
        decimals = executor.submit(lambda: fns.decimals().call())
        symbol = executor.submit(lambda: fns.symbol().call())
        name = executor.submit(lambda: fns.name().call())
        balance = executor.submit(lambda: fns.balanceOf(wallet_address).call())

        token = Token(
            chain_id=chain_id,
            address=contract.address,
            decimals=int(decimals.result()),
            symbol=symbol.result(),
            name=name.result(),
        )
        return token, int(balance.result())


def fetch_balances(contracts: List, wallet_address: str) -> List[int]:
    """balanceOf for every contract, in input order"""
    if not contracts:
        return []

    with ThreadPoolExecutor(max_workers=len(contracts)) as executor:
        futures = [
            executor.submit(c.functions.balanceOf(wallet_address).call)
            for c in contracts
        ]
        return [int(f.result()) for f in futures]
