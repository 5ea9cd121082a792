"""Data models — all frozen (immutable).

Every USD value is a derived property computed from raw balances and
resolved prices; nothing stores a dollar amount independently.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Mapping

from .config import ChainId

PositionType = Literal["supply", "borrow", "stake", "restake", "liquidity", "collateral"]
ProtocolCategory = Literal["lending", "liquid-staking", "restaking", "dex"]
PriceSource = Literal["cache", "oracle", "synthetic", "market", "unknown"]
RiskLevel = Literal["low", "medium", "high"]

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


def format_units(value: int, decimals: int) -> str:
    """Render a base-unit integer as an exact decimal string (``1500000, 6 -> "1.5"``)."""
    negative = value < 0
    digits = str(abs(value))
    if decimals <= 0:
        text = digits
    else:
        digits = digits.rjust(decimals + 1, "0")
        whole, frac = digits[:-decimals], digits[-decimals:].rstrip("0")
        text = f"{whole}.{frac}" if frac else whole
    return f"-{text}" if negative else text


@dataclass(frozen=True)
class TokenBalance:
    """Token amount in base units together with its resolved USD price."""

    address: str
    symbol: str
    decimals: int
    balance: int
    price_usd: float = 0.0

    @property
    def balance_formatted(self) -> str:
        return format_units(self.balance, self.decimals)

    @property
    def value_usd(self) -> float:
        return float(self.balance_formatted) * self.price_usd

    def with_price(self, price_usd: float) -> TokenBalance:
        return replace(self, price_usd=price_usd)


@dataclass(frozen=True)
class ProtocolInfo:
    id: str
    name: str
    category: ProtocolCategory
    earns_yield: bool = True
    website: str = ""


@dataclass(frozen=True)
class YieldInfo:
    apy: float
    apr: float


@dataclass(frozen=True)
class Position:
    """A single protocol position (supply, borrow, stake, ...) on one chain."""

    id: str
    protocol: ProtocolInfo
    chain_id: ChainId
    type: PositionType
    tokens: tuple[TokenBalance, ...]
    yield_info: YieldInfo | None = None
    health_factor: float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def value_usd(self) -> float:
        total = sum(token.value_usd for token in self.tokens)
        return -total if self.type == "borrow" else total

    @property
    def primary_token(self) -> TokenBalance | None:
        return self.tokens[0] if self.tokens else None

    def with_tokens(self, tokens: tuple[TokenBalance, ...]) -> Position:
        return replace(self, tokens=tokens)


@dataclass(frozen=True)
class ChainBalances:
    """Wallet token balances held directly on one chain."""

    chain_id: ChainId
    chain_name: str
    balances: tuple[TokenBalance, ...] = ()

    @property
    def total_value_usd(self) -> float:
        return sum(b.value_usd for b in self.balances)


@dataclass(frozen=True)
class WalletBalances:
    address: str
    chains: tuple[ChainBalances, ...] = ()
    fetched_at: int = 0

    @property
    def total_value_usd(self) -> float:
        return sum(c.total_value_usd for c in self.chains)

    @property
    def balances(self) -> tuple[TokenBalance, ...]:
        return tuple(b for c in self.chains for b in c.balances)


@dataclass(frozen=True)
class ChainPortfolio:
    chain_id: ChainId
    chain_name: str
    positions: tuple[Position, ...] = ()

    @property
    def total_value_usd(self) -> float:
        return sum(p.value_usd for p in self.positions)


@dataclass(frozen=True)
class ProtocolPortfolio:
    protocol_id: str
    protocol_name: str
    positions: tuple[Position, ...] = ()

    @property
    def total_value_usd(self) -> float:
        return sum(p.value_usd for p in self.positions)


@dataclass(frozen=True)
class Portfolio:
    """Immutable read-model built once per request."""

    address: str
    positions: tuple[Position, ...] = ()
    by_chain: Mapping[ChainId, ChainPortfolio] = field(default_factory=dict)
    by_protocol: Mapping[str, ProtocolPortfolio] = field(default_factory=dict)
    by_type: Mapping[str, tuple[Position, ...]] = field(default_factory=dict)
    wallet: WalletBalances | None = None
    fetched_at: int = 0

    @property
    def positions_value_usd(self) -> float:
        return sum(p.value_usd for p in self.positions)

    @property
    def total_value_usd(self) -> float:
        wallet_total = self.wallet.total_value_usd if self.wallet else 0.0
        return self.positions_value_usd + wallet_total


@dataclass(frozen=True)
class TokenPrice:
    address: str
    price_usd: float
    source: PriceSource
    updated_at: int


@dataclass(frozen=True)
class YieldRate:
    """Protocol-wide supply-side rate for one asset on one chain."""

    protocol: str
    chain_id: ChainId
    asset: str
    asset_symbol: str
    type: PositionType
    apy: float
    apr: float
    tvl: float | None = None


@dataclass(frozen=True)
class YieldAlternative:
    protocol: str
    protocol_name: str
    chain_id: ChainId
    asset: str
    apy: float
    apy_improvement: float
    annual_gain_usd: float
    risk: RiskLevel


@dataclass(frozen=True)
class YieldOpportunity:
    current_position: Position
    better_alternatives: tuple[YieldAlternative, ...]
    potential_gain_apy: float
    potential_gain_usd: float


@dataclass(frozen=True)
class IdleAsset:
    token: str
    symbol: str
    balance: int
    value_usd: float
    chain_id: ChainId
    best_yield_opportunities: tuple[YieldAlternative, ...]


@dataclass(frozen=True)
class YieldAnalysis:
    address: str
    total_current_yield: float
    total_potential_yield: float
    opportunities: tuple[YieldOpportunity, ...] = ()
    idle_assets: tuple[IdleAsset, ...] = ()
    analyzed_at: int = 0
