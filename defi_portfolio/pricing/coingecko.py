"""Rate-limited CoinGecko client (market tier)."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import ChainId, CoinGeckoConfig
from .rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

PLATFORM_IDS: dict[ChainId, str] = {
    1: "ethereum",
    42161: "arbitrum-one",
    10: "optimistic-ethereum",
    8453: "base",
    137: "polygon-pos",
    43114: "avalanche",
    56: "binance-smart-chain",
    "solana": "solana",
}


class CoinGeckoClient:
    """Look up USD prices by CoinGecko id or by contract address.

    Every request first takes a token from the shared bucket. HTTP 429
    and transport errors yield ``None`` so the caller can fall through.
    """

    def __init__(self, config: CoinGeckoConfig, limiter: TokenBucket | None = None) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.api_key = config.api_key
        self.timeout = config.timeout
        self.limiter = limiter or TokenBucket(
            config.rate_limit.capacity, config.rate_limit.refill_per_second
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def _get_json(self, path: str, params: dict[str, str]) -> Any | None:
        await self.limiter.acquire()

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        url = f"{self.base_url}{path}"

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status == 429:
                        logger.warning("CoinGecko rate limit hit for %s", path)
                        return None
                    if response.status != 200:
                        logger.error("CoinGecko error for %s: HTTP %s", path, response.status)
                        return None
                    return await response.json()
        except Exception as e:
            logger.error("CoinGecko request failed for %s: %s", path, e)
            return None

    async def get_price_by_id(self, coingecko_id: str) -> float | None:
        data = await self._get_json(
            "/simple/price", {"ids": coingecko_id, "vs_currencies": "usd"}
        )
        if not data:
            return None
        price = data.get(coingecko_id, {}).get("usd")
        return float(price) if price is not None else None

    async def get_price_by_contract(self, chain_id: ChainId, address: str) -> float | None:
        platform = PLATFORM_IDS.get(chain_id)
        if platform is None:
            return None
        data = await self._get_json(
            f"/simple/token_price/{platform}",
            {"contract_addresses": address, "vs_currencies": "usd"},
        )
        if not data:
            return None
        # Response keys are lower-cased for EVM contracts
        entry = data.get(address) or data.get(address.lower()) or {}
        price = entry.get("usd")
        return float(price) if price is not None else None
