"""Portfolio aggregation — fans out across chains and protocol adapters."""
from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from dataclasses import replace
from typing import Any, Callable, Sequence

from ..chains.registry import ChainRegistry
from ..config import ChainId, PortfolioConfig
from ..models import ChainPortfolio, Portfolio, Position, ProtocolPortfolio, WalletBalances
from ..pricing.cache import TTLCache
from ..pricing.service import PriceService, price_key
from ..protocols.base import BaseProtocolAdapter, BranchResult
from ..protocols.registry import ProtocolRegistry
from ..validation import ValidationError, address_family, normalize_address, parse_chain_ids
from ..wallet.balance_fetcher import WalletBalanceFetcher

logger = logging.getLogger(__name__)


class RequestTimeoutError(TimeoutError):
    """The whole portfolio request exceeded its time budget."""


class PortfolioAggregator:
    """Builds a :class:`Portfolio` for one address.

    Per chain, wallet balances and protocol discovery run concurrently.
    Discovery is two-phase: every adapter is probed first, then only the
    adapters that reported positions are read. One failing adapter or chain
    never fails the request.
    """

    def __init__(
        self,
        chains: ChainRegistry,
        protocols: ProtocolRegistry,
        balances: WalletBalanceFetcher,
        prices: PriceService,
        config: PortfolioConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chains = chains
        self.protocols = protocols
        self.balances = balances
        self.prices = prices
        self.config = config or PortfolioConfig()
        self._clock = clock
        self._results = TTLCache(self.config.result_cache_ttl_seconds, clock=clock)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_portfolio(
        self, address: str, chain_ids: str | Sequence[ChainId] | None = None
    ) -> Portfolio:
        address, selected = self._validate(address, chain_ids)

        cache_key = (address, selected)
        cached = await self._results.get(cache_key)
        if cached is not None:
            logger.debug("Serving cached portfolio for %s", address)
            return cached

        try:
            portfolio = await asyncio.wait_for(
                self._build(address, selected), timeout=self.config.request_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(
                "Portfolio request for %s timed out after %ss",
                address,
                self.config.request_timeout_seconds,
            )
            raise RequestTimeoutError(
                f"Portfolio request timed out after {self.config.request_timeout_seconds}s"
            ) from None

        await self._results.set(cache_key, portfolio)
        return portfolio

    async def clear_cache(self) -> None:
        await self._results.clear()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate(
        self, address: str, chain_ids: str | Sequence[ChainId] | None
    ) -> tuple[str, tuple[ChainId, ...]]:
        family = address_family(address)
        address = normalize_address(address)

        requested = parse_chain_ids(chain_ids)
        if requested is None:
            return address, tuple(self.chains.supported_chain_ids(family))

        for chain_id in requested:
            if not self.chains.is_supported(chain_id):
                raise ValidationError(f"Unsupported chain: {chain_id}")
            if self.chains.get_config(chain_id).family != family:
                raise ValidationError(f"Address {address} is not valid on chain {chain_id}")
        return address, requested

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def _build(self, address: str, chain_ids: tuple[ChainId, ...]) -> Portfolio:
        logger.info("Building portfolio for %s on %d chain(s)", address, len(chain_ids))

        wallet_task = self.balances.get_balances(address, chain_ids)
        discovery = asyncio.gather(*(self._discover_chain(address, c) for c in chain_ids))
        wallet, per_chain = await asyncio.gather(wallet_task, discovery)

        raw_positions = [p for positions in per_chain for p in positions]
        positions = await self.prices.price_positions(raw_positions, self.chains.get_client)
        wallet = self._without_staked(wallet, positions)
        return self._assemble(address, chain_ids, positions, wallet)

    async def _discover_chain(self, address: str, chain_id: ChainId) -> list[Position]:
        adapters = self.protocols.get_adapters_for_chain(chain_id)
        if not adapters:
            return []
        try:
            client = self.chains.get_client(chain_id)
        except Exception as e:
            logger.error("[chain %s] No client available: %s", chain_id, e)
            return []

        probes = await asyncio.gather(
            *(adapter.has_positions(client, address, chain_id) for adapter in adapters),
            return_exceptions=True,
        )
        active: list[BaseProtocolAdapter] = []
        for adapter, probe in zip(adapters, probes):
            if isinstance(probe, Exception):
                logger.warning("[%s] Probe failed on chain %s: %s", adapter.id, chain_id, probe)
            elif probe:
                active.append(adapter)
        if not active:
            return []
        logger.debug(
            "[chain %s] Active protocols: %s", chain_id, ", ".join(a.id for a in active)
        )

        outcomes = await asyncio.gather(
            *(adapter.collect_positions(client, address, chain_id) for adapter in active),
            return_exceptions=True,
        )
        positions: list[Position] = []
        for adapter, outcome in zip(active, outcomes):
            result = self._branch_result(adapter, chain_id, outcome)
            if result.status == "failure":
                logger.error(
                    "[%s] Branch failed on chain %s: %s",
                    adapter.id,
                    chain_id,
                    "; ".join(result.errors),
                )
                continue
            positions.extend(result.positions)
        return positions

    @staticmethod
    def _branch_result(
        adapter: BaseProtocolAdapter, chain_id: ChainId, outcome: Any
    ) -> BranchResult:
        if isinstance(outcome, BranchResult):
            return outcome
        return BranchResult(adapter.id, chain_id, "failure", errors=(str(outcome),))

    @staticmethod
    def _without_staked(wallet: WalletBalances, positions: list[Position]) -> WalletBalances:
        """Drop wallet balances already reported as a ``stake`` position.

        Liquid staking tokens sit in the token catalog and are also read
        by their staking adapter; the holding is counted once, as the
        position.
        """
        staked = {
            price_key(p.chain_id, t.address)
            for p in positions
            if p.type == "stake"
            for t in p.tokens
        }
        if not staked:
            return wallet
        chains = tuple(
            replace(
                chain,
                balances=tuple(
                    b for b in chain.balances if price_key(chain.chain_id, b.address) not in staked
                ),
            )
            for chain in wallet.chains
        )
        return replace(wallet, chains=chains)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _assemble(
        self,
        address: str,
        chain_ids: tuple[ChainId, ...],
        positions: list[Position],
        wallet: WalletBalances,
    ) -> Portfolio:
        by_chain_positions: dict[ChainId, list[Position]] = {c: [] for c in chain_ids}
        by_protocol_positions: dict[str, list[Position]] = defaultdict(list)
        by_type: dict[str, list[Position]] = defaultdict(list)
        protocol_names: dict[str, str] = {}

        for position in positions:
            by_chain_positions.setdefault(position.chain_id, []).append(position)
            by_protocol_positions[position.protocol.id].append(position)
            protocol_names[position.protocol.id] = position.protocol.name
            by_type[position.type].append(position)

        by_chain = {
            chain_id: ChainPortfolio(chain_id, self.chains.chain_name(chain_id), tuple(items))
            for chain_id, items in by_chain_positions.items()
        }
        by_protocol = {
            protocol_id: ProtocolPortfolio(protocol_id, protocol_names[protocol_id], tuple(items))
            for protocol_id, items in by_protocol_positions.items()
        }

        portfolio = Portfolio(
            address=address,
            positions=tuple(positions),
            by_chain=by_chain,
            by_protocol=by_protocol,
            by_type={t: tuple(items) for t, items in by_type.items()},
            wallet=wallet,
            fetched_at=int(self._clock() * 1000),
        )
        logger.info(
            "Portfolio for %s: %d position(s), $%.2f total",
            address,
            len(positions),
            portfolio.total_value_usd,
        )
        return portfolio
