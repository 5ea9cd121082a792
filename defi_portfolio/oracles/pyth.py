"""Pyth Network price oracle (oracle tier for Solana)."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import ChainId, PythConfig

logger = logging.getLogger(__name__)

# Wrapped / bridged symbols that share a feed with their base asset.
_FEED_ALIASES = {"WSOL": "SOL", "WETH": "ETH", "WBTC": "BTC", "USDC.E": "USDC"}


class PythOracle:
    """Fetch prices from the Pyth Hermes API."""

    def __init__(self, config: PythConfig, timeout: int = 10) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)
        self.timeout = timeout

    def _feed_symbol(self, symbol: str) -> str:
        upper = symbol.upper()
        return _FEED_ALIASES.get(upper, upper)

    async def get_price(self, client: Any, symbol: str, chain_id: ChainId) -> float | None:
        """Oracle-tier lookup for one symbol.

        ``client`` and ``chain_id`` are accepted for parity with on-chain
        oracles; Hermes is chain-agnostic.
        """
        feed_symbol = self._feed_symbol(symbol)
        if feed_symbol not in self.price_feeds:
            return None
        prices = await self.fetch_prices([feed_symbol])
        return prices.get(feed_symbol)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, float]:
        """Fetch current prices from Pyth Network.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        prices: dict[str, float] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return prices

        # Hermes returns ids without the 0x prefix
        id_to_assets: dict[str, list[str]] = {}
        for asset, feed_id in feeds.items():
            id_to_assets.setdefault(feed_id.lower().removeprefix("0x"), []).append(asset)

        for item in data.get("parsed", []):
            feed_id = str(item.get("id", "")).lower().removeprefix("0x")
            price_data = item.get("price", {})
            price_raw = int(price_data.get("price", 0))
            expo = int(price_data.get("expo", 0))

            for asset in id_to_assets.get(feed_id, []):
                prices[asset] = price_raw * (10**expo)

        logger.debug("Fetched %d prices from Pyth Network", len(prices))
        return prices
