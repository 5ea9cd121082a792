"""Yield opportunity analysis over an already-built portfolio."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable

from ..chains.registry import ChainRegistry
from ..config import ChainId, YieldAnalysisConfig
from ..interfaces.protocol_adapter import ProtocolAdapter
from ..models import (
    IdleAsset,
    Portfolio,
    Position,
    RiskLevel,
    TokenBalance,
    YieldAlternative,
    YieldAnalysis,
    YieldOpportunity,
    YieldRate,
)
from ..pricing.assets import is_equivalent_asset
from ..protocols.registry import ProtocolRegistry

logger = logging.getLogger(__name__)


class YieldAnalyzer:
    """Compares held positions against current protocol rates.

    Two scans run over the portfolio:

    * **Opportunities** -- yield-bearing positions for which another
      (protocol, chain) pair pays more on an equivalent asset by more than
      ``min_apy_improvement``.
    * **Idle assets** -- positions that earn nothing, plus wallet balances,
      matched against the best rates for an equivalent asset.

    Only positions and balances worth at least ``min_value_usd`` are
    considered. Risk labels are a static per-protocol classification.
    """

    def __init__(
        self,
        chains: ChainRegistry,
        protocols: ProtocolRegistry,
        config: YieldAnalysisConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chains = chains
        self.protocols = protocols
        self.config = config or YieldAnalysisConfig()
        self._clock = clock

    async def analyze(
        self, portfolio: Portfolio, address: str, rates: list[YieldRate] | None = None
    ) -> YieldAnalysis:
        if rates is None:
            rates = await self.fetch_rates()
        logger.info("Analyzing yield for %s against %d rate(s)", address, len(rates))

        opportunities = self.find_opportunities(portfolio.positions, rates)
        idle_assets = self.find_idle_assets(portfolio, rates)

        current = sum(
            p.value_usd * p.yield_info.apy for p in portfolio.positions if p.yield_info
        )
        potential = current + sum(o.potential_gain_usd for o in opportunities)

        return YieldAnalysis(
            address=address,
            total_current_yield=current,
            total_potential_yield=potential,
            opportunities=tuple(opportunities),
            idle_assets=tuple(idle_assets),
            analyzed_at=int(self._clock() * 1000),
        )

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    async def fetch_rates(self) -> list[YieldRate]:
        """Current rates from every adapter on every registered chain."""
        tasks = []
        for chain_id in self.chains.supported_chain_ids():
            for adapter in self.protocols.get_adapters_for_chain(chain_id):
                tasks.append(self._adapter_rates(adapter, chain_id))
        batches = await asyncio.gather(*tasks)
        return [rate for batch in batches for rate in batch]

    async def _adapter_rates(
        self, adapter: ProtocolAdapter, chain_id: ChainId
    ) -> list[YieldRate]:
        try:
            client = self.chains.get_client(chain_id)
            return list(await adapter.get_yield_rates(client, chain_id))
        except Exception as e:
            logger.warning(
                "[%s] Failed to fetch yield rates on chain %s: %s", adapter.protocol.id, chain_id, e
            )
            return []

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def find_opportunities(
        self, positions: Iterable[Position], rates: list[YieldRate]
    ) -> list[YieldOpportunity]:
        opportunities: list[YieldOpportunity] = []

        for position in positions:
            token = position.primary_token
            if position.yield_info is None or token is None:
                continue
            value = position.value_usd
            if value < self.config.min_value_usd:
                continue

            current_apy = position.yield_info.apy
            alternatives: list[YieldAlternative] = []
            for rate in rates:
                if rate.protocol == position.protocol.id and rate.chain_id == position.chain_id:
                    continue
                if not is_equivalent_asset(token.symbol, rate.asset_symbol):
                    continue
                improvement = rate.apy - current_apy
                if improvement <= self.config.min_apy_improvement:
                    continue
                alternatives.append(self._alternative(rate, improvement, value * improvement))

            if not alternatives:
                continue
            alternatives.sort(key=lambda a: a.apy, reverse=True)
            best = alternatives[0]
            opportunities.append(
                YieldOpportunity(
                    current_position=position,
                    better_alternatives=tuple(alternatives),
                    potential_gain_apy=best.apy_improvement,
                    potential_gain_usd=best.annual_gain_usd,
                )
            )

        opportunities.sort(key=lambda o: o.potential_gain_usd, reverse=True)
        return opportunities

    def find_idle_assets(self, portfolio: Portfolio, rates: list[YieldRate]) -> list[IdleAsset]:
        candidates: list[tuple[TokenBalance, float, ChainId]] = []
        for position in portfolio.positions:
            token = position.primary_token
            if position.yield_info is None and token is not None:
                candidates.append((token, position.value_usd, position.chain_id))
        if portfolio.wallet is not None:
            for chain in portfolio.wallet.chains:
                for balance in chain.balances:
                    candidates.append((balance, balance.value_usd, chain.chain_id))

        idle: list[IdleAsset] = []
        for token, value, chain_id in candidates:
            if value < self.config.min_value_usd:
                continue
            suggestions = [
                self._alternative(rate, rate.apy, value * rate.apy)
                for rate in rates
                if is_equivalent_asset(token.symbol, rate.asset_symbol)
            ]
            if not suggestions:
                continue
            suggestions.sort(key=lambda a: a.apy, reverse=True)
            idle.append(
                IdleAsset(
                    token=token.address,
                    symbol=token.symbol,
                    balance=token.balance,
                    value_usd=value,
                    chain_id=chain_id,
                    best_yield_opportunities=tuple(
                        suggestions[: self.config.max_idle_suggestions]
                    ),
                )
            )
        return idle

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def risk_level(self, protocol_id: str) -> RiskLevel:
        for tier in ("low", "medium"):
            if protocol_id in self.config.risk_tiers.get(tier, ()):
                return tier
        return "high"

    def _protocol_name(self, protocol_id: str) -> str:
        adapter = self.protocols.get_adapter(protocol_id)
        return adapter.protocol.name if adapter else protocol_id

    def _alternative(self, rate: YieldRate, improvement: float, gain: float) -> YieldAlternative:
        return YieldAlternative(
            protocol=rate.protocol,
            protocol_name=self._protocol_name(rate.protocol),
            chain_id=rate.chain_id,
            asset=rate.asset,
            apy=rate.apy,
            apy_improvement=improvement,
            annual_gain_usd=gain,
            risk=self.risk_level(rate.protocol),
        )
