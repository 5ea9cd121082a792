"""Portfolio tracker — wires registries, pricing and analysis from config."""
from __future__ import annotations

import logging
from typing import Sequence

from ..chains.registry import ChainRegistry, ClientFactory
from ..config import AppConfig, ChainId
from ..models import Portfolio, YieldAnalysis
from ..oracles import ChainlinkOracle, PythOracle
from ..pricing import CoinGeckoClient, PriceService
from ..protocols.registry import ProtocolRegistry, build_default_registry
from ..tokens.catalog import TokenCatalog
from ..wallet.balance_fetcher import WalletBalanceFetcher
from .aggregator import PortfolioAggregator
from .yield_analyzer import YieldAnalyzer

logger = logging.getLogger(__name__)


class PortfolioTracker:
    """Single entry point for portfolio and yield queries."""

    def __init__(
        self,
        config: AppConfig,
        protocols: ProtocolRegistry | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config

        self.catalog = TokenCatalog()
        self.chains = ChainRegistry(config.chains, client_factory)
        self.protocols = protocols or build_default_registry(self.catalog)

        pricing = config.pricing
        self.prices = PriceService(
            pricing,
            evm_oracle=ChainlinkOracle(),
            solana_oracle=PythOracle(pricing.pyth, timeout=pricing.coingecko.timeout),
            market=CoinGeckoClient(pricing.coingecko),
            catalog=self.catalog,
        )
        self.balances = WalletBalanceFetcher(self.chains, self.catalog, self.prices)
        self.aggregator = PortfolioAggregator(
            self.chains, self.protocols, self.balances, self.prices, config.portfolio
        )
        self.analyzer = YieldAnalyzer(self.chains, self.protocols, config.yield_analysis)

        logger.info(
            "Tracker ready: %d chain(s), %d protocol adapter(s)",
            len(config.chains),
            len(self.protocols),
        )

    async def get_portfolio(
        self, address: str, chain_ids: str | Sequence[ChainId] | None = None
    ) -> Portfolio:
        return await self.aggregator.get_portfolio(address, chain_ids)

    async def analyze_yield(
        self, address: str, chain_ids: str | Sequence[ChainId] | None = None
    ) -> YieldAnalysis:
        """Build (or reuse) the portfolio, then rank better rates for it."""
        portfolio = await self.get_portfolio(address, chain_ids)
        return await self.analyzer.analyze(portfolio, portfolio.address)

    async def close(self) -> None:
        await self.chains.close()
