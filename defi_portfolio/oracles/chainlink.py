"""Chainlink aggregator reader (oracle tier for EVM chains)."""
import asyncio
import logging
from typing import Any

from ..config import ChainId

logger = logging.getLogger(__name__)

AGGREGATOR_V3_ABI = [
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"name": "roundId", "type": "uint80"},
            {"name": "answer", "type": "int256"},
            {"name": "startedAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
            {"name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]

_ETH_USD = {
    1: "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
    42161: "0x639Fe6ab55C921f74e7fac1ee960C0B6293ba612",
    10: "0x13e3Ee699D1909E989722E753853AE30b17e08c5",
    8453: "0x71041dddad3595F9CEd3DcCFBe3D1F4b0a16Bb70",
    137: "0xF9680D99D6C9589e2a93a78A04A279e509205945",
    43114: "0x976B3D034E162d8bD72D6b9C989d545b839003b0",
    56: "0x9ef1B8c0E4F7dc8bF5719Ea496883DC6401d5b2e",
}

# USD-denominated feeds only, keyed by upper-case symbol then chain id.
CHAINLINK_FEEDS: dict[str, dict[ChainId, str]] = {
    "ETH": _ETH_USD,
    "WETH": _ETH_USD,
    "USDC": {
        1: "0x8fFfFfd4AfB6115b954Bd326cbe7B4BA576818f6",
        42161: "0x50834F3163758fcC1Df9973b6e91f0F0F0434aD3",
        10: "0x16a9FA2FDa030272Ce99B29CF780dFA30361E0f3",
        8453: "0x7e860098F58bBFC8648a4311b374B1D669a2bc6B",
    },
    "USDT": {
        1: "0x3E7d1eAB13ad0104d2750B8863b489D65364e32D",
        42161: "0x3f3f5dF88dC9F13eac63DF89EC16ef6e7E25DdE7",
        10: "0xECef79E109e997bCA29c1c0897ec9d7678E2E0f5",
    },
    "DAI": {
        1: "0xAed0c38402a5d19df6E4c03F4E2DceD6e29c1ee9",
        42161: "0xc5C8E77B397E531B8EC06BFb0048328B30E9eCfB",
        10: "0x8dBa75e83DA73cc766A7e5a0ee71F656BAa1A5e1",
    },
    "WBTC": {
        1: "0xF4030086522a5bEEa4988F8cA5B36dbC97BeE88c",
        42161: "0xd0C7101eACbB49F3deCcCc166d238410D6D46d57",
        10: "0xD702DD976Fb76Fffc2D3963D037dfDae5b04E593",
    },
    "STETH": {1: "0xCfE54B5cD566aB89272946F602D76Ea879CAb4a8"},
    "LINK": {
        1: "0x2c1d072e956AFFC0D435Cb7AC38EF18d24d9127c",
        42161: "0x86E53CF1B870786351Da77A57575e79CB55812CB",
        10: "0xCc232dcFAAE6354cE191Bd574108c1aD03f86FeD",
    },
    "AAVE": {1: "0x547a514d5e3769680Ce22B2361c10Ea13619e8a9"},
    "POL": {137: "0xAB594600376Ec9fD91F8e885dADF0CE036862dE0"},
    "AVAX": {43114: "0x0A77230d17318075983913bC2145DB16C7366156"},
    "BNB": {56: "0x0567F2323251f0Aab15c8dFb1967E4e8A7D42aeE"},
}


class ChainlinkOracle:
    """Read USD prices from Chainlink aggregators through an EVM client."""

    def __init__(self, feeds: dict[str, dict[ChainId, str]] | None = None) -> None:
        self.feeds = CHAINLINK_FEEDS if feeds is None else feeds

    def feed_address(self, symbol: str, chain_id: ChainId) -> str | None:
        return self.feeds.get(symbol.upper(), {}).get(chain_id)

    async def get_price(self, client: Any, symbol: str, chain_id: ChainId) -> float | None:
        """USD price for ``symbol`` on ``chain_id``; None when no feed or the read fails."""
        feed = self.feed_address(symbol, chain_id)
        if feed is None:
            return None

        try:
            round_data, decimals = await asyncio.gather(
                client.call(feed, AGGREGATOR_V3_ABI, "latestRoundData"),
                client.call(feed, AGGREGATOR_V3_ABI, "decimals"),
            )
        except Exception as e:
            logger.warning("[chain %s] Chainlink read failed for %s: %s", chain_id, symbol, e)
            return None

        answer = int(round_data[1])
        if answer <= 0:
            logger.warning("[chain %s] Chainlink returned non-positive answer for %s", chain_id, symbol)
            return None
        return answer / 10 ** int(decimals)
