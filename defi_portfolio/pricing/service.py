"""Price resolution service.

Resolves a USD price for a (chain, token) pair by walking a fixed tier
order and stopping at the first tier that produces a price:

    cache -> oracle -> stablecoin -> derivative -> market -> unknown

Every resolution, including synthetic and unknown prices, is written to
the TTL cache so repeated lookups inside the window make no remote calls.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Iterable

from ..config import SOLANA_CHAIN_ID, ChainId, PricingConfig
from ..interfaces.price_oracle import PriceOracle
from ..models import NATIVE_TOKEN_ADDRESS, Position, TokenBalance, TokenPrice
from ..tokens.catalog import NATIVE_COINGECKO_IDS, TokenCatalog
from .assets import is_stablecoin
from .cache import TTLCache
from .coingecko import CoinGeckoClient

logger = logging.getLogger(__name__)

PriceKey = tuple[ChainId, str]


def price_key(chain_id: ChainId, address: str) -> PriceKey:
    # Base58 mints are case-sensitive; hex addresses are not.
    return (chain_id, address if chain_id == SOLANA_CHAIN_ID else address.lower())


class PriceService:
    def __init__(
        self,
        config: PricingConfig,
        evm_oracle: PriceOracle | None,
        solana_oracle: PriceOracle | None,
        market: CoinGeckoClient | None,
        catalog: TokenCatalog,
        cache: TTLCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.evm_oracle = evm_oracle
        self.solana_oracle = solana_oracle
        self.market = market
        self.catalog = catalog
        self._clock = clock
        self.cache = cache or TTLCache(config.cache_ttl_seconds, clock=clock)
        self._inflight: dict[PriceKey, asyncio.Future[TokenPrice]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_price(
        self, client: Any, chain_id: ChainId, address: str, symbol: str
    ) -> TokenPrice:
        key = price_key(chain_id, address)

        cached = await self.cache.get(key)
        if cached is not None:
            return replace(cached, source="cache")

        # Concurrent lookups for the same key share one resolution.
        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._resolve_and_store(client, chain_id, address, symbol))
            self._inflight[key] = pending
            pending.add_done_callback(lambda _: self._inflight.pop(key, None))
        # A cancelled caller leaves the shared resolution running for the rest.
        return await asyncio.shield(pending)

    async def price_balances(
        self, client: Any, chain_id: ChainId, balances: Iterable[TokenBalance]
    ) -> tuple[TokenBalance, ...]:
        balances = tuple(balances)
        prices = await asyncio.gather(
            *(self.get_price(client, chain_id, b.address, b.symbol) for b in balances)
        )
        return tuple(b.with_price(p.price_usd) for b, p in zip(balances, prices))

    async def price_positions(
        self, positions: Iterable[Position], client_for_chain: Callable[[ChainId], Any]
    ) -> list[Position]:
        async def _price(position: Position) -> Position:
            tokens = await self.price_balances(
                client_for_chain(position.chain_id), position.chain_id, position.tokens
            )
            return position.with_tokens(tokens)

        return list(await asyncio.gather(*(_price(p) for p in positions)))

    async def clear_cache(self) -> None:
        await self.cache.clear()

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _resolve_and_store(
        self, client: Any, chain_id: ChainId, address: str, symbol: str
    ) -> TokenPrice:
        price, source = await self._resolve(client, chain_id, address, symbol)
        result = TokenPrice(
            address=address,
            price_usd=price,
            source=source,
            updated_at=int(self._clock() * 1000),
        )
        await self.cache.set(price_key(chain_id, address), result)
        if source == "unknown":
            logger.warning("[chain %s] No price found for %s (%s)", chain_id, symbol, address)
        return result

    async def _resolve(
        self, client: Any, chain_id: ChainId, address: str, symbol: str
    ) -> tuple[float, str]:
        upper = symbol.upper()

        price = await self._oracle_price(client, chain_id, upper)
        if price is not None:
            return price, "oracle"

        if is_stablecoin(upper):
            return 1.0, "synthetic"
        if upper in self.config.stablecoin_pegs:
            return self.config.stablecoin_pegs[upper], "synthetic"

        derivative = self.config.derivative_premiums.get(upper)
        if derivative is not None:
            base_price = await self._oracle_price(client, chain_id, derivative.base)
            if base_price is None:
                base_id = NATIVE_COINGECKO_IDS.get(derivative.base)
                base_price = await self._market_by_id(base_id) if base_id else None
            if base_price is not None:
                return base_price * derivative.premium, "synthetic"

        price = await self._market_price(chain_id, address, upper)
        if price is not None:
            return price, "market"

        return 0.0, "unknown"

    def _oracle_for(self, chain_id: ChainId) -> PriceOracle | None:
        return self.solana_oracle if chain_id == SOLANA_CHAIN_ID else self.evm_oracle

    async def _oracle_price(self, client: Any, chain_id: ChainId, symbol: str) -> float | None:
        oracle = self._oracle_for(chain_id)
        if oracle is None:
            return None
        try:
            price = await oracle.get_price(client, symbol, chain_id)
        except Exception as e:
            logger.warning("[chain %s] Oracle lookup failed for %s: %s", chain_id, symbol, e)
            return None
        return price if price and price > 0 else None

    async def _market_by_id(self, coingecko_id: str) -> float | None:
        if self.market is None:
            return None
        try:
            price = await self.market.get_price_by_id(coingecko_id)
        except Exception as e:
            logger.warning("Market lookup failed for %s: %s", coingecko_id, e)
            return None
        return price if price and price > 0 else None

    async def _market_price(self, chain_id: ChainId, address: str, symbol: str) -> float | None:
        if self.market is None:
            return None

        coingecko_id = self.catalog.coingecko_id(chain_id, address, symbol)
        if coingecko_id:
            return await self._market_by_id(coingecko_id)

        if chain_id == SOLANA_CHAIN_ID or address.lower() == NATIVE_TOKEN_ADDRESS:
            return None
        try:
            price = await self.market.get_price_by_contract(chain_id, address)
        except Exception as e:
            logger.warning("[chain %s] Market lookup failed for %s: %s", chain_id, address, e)
            return None
        return price if price and price > 0 else None
