"""Static per-chain token catalog used for wallet discovery and price lookups."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from ..config import SOLANA_CHAIN_ID, ChainId


@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int
    name: str = ""
    coingecko_id: str | None = None
    category: str | None = None


def _t(address: str, symbol: str, decimals: int, name: str, cg: str | None = None,
       category: str | None = None) -> TokenInfo:
    return TokenInfo(address, symbol, decimals, name, cg, category)


ETHEREUM_TOKENS = (
    _t("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "WETH", 18, "Wrapped Ether", "weth"),
    _t("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "WBTC", 8, "Wrapped Bitcoin", "wrapped-bitcoin"),
    _t("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", 18, "Dai", "dai", "stablecoin"),
    _t("0x4c9EDD5852cd905f086C759E8383e09bff1E68B3", "USDe", 18, "Ethena USDe", "ethena-usde", "stablecoin"),
    _t("0xdC035D45d973E3EC169d2276DDab16f1e407384F", "USDS", 18, "USDS", "usds", "stablecoin"),
    _t("0x853d955aCEf822Db058eb8505911ED77F175b99e", "FRAX", 18, "Frax", "frax", "stablecoin"),
    _t("0x5f98805A4E8be255a32880FDeC7F6728C6568bA0", "LUSD", 18, "Liquity USD", "liquity-usd", "stablecoin"),
    _t("0x1aBaEA1f7C830bD89Acc67eC4af516284b1bC33c", "EURC", 6, "Euro Coin", "euro-coin", "stablecoin"),
    _t("0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84", "stETH", 18, "Lido Staked ETH", "staked-ether", "lsd"),
    _t("0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0", "wstETH", 18, "Wrapped stETH", "wrapped-steth", "lsd"),
    _t("0xae78736Cd615f374D3085123A210448E74Fc6393", "rETH", 18, "Rocket Pool ETH", "rocket-pool-eth", "lsd"),
    _t("0xBe9895146f7AF43049ca1c1AE358B0541Ea49704", "cbETH", 18, "Coinbase Wrapped Staked ETH",
       "coinbase-wrapped-staked-eth", "lsd"),
    _t("0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9", "AAVE", 18, "Aave", "aave", "defi"),
    _t("0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984", "UNI", 18, "Uniswap", "uniswap", "defi"),
    _t("0x5A98FcBEA516Cf06857215779Fd812CA3beF1B32", "LDO", 18, "Lido DAO", "lido-dao", "defi"),
    _t("0x514910771AF9Ca656af840dff83E8264EcF986CA", "LINK", 18, "Chainlink", "chainlink"),
)

ARBITRUM_TOKENS = (
    _t("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "WETH", 18, "Wrapped Ether", "weth"),
    _t("0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f", "WBTC", 8, "Wrapped Bitcoin", "wrapped-bitcoin"),
    _t("0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0xFF970A61A04b1cA14834A43f5dE4533eBDDB5CC8", "USDC.e", 6, "Bridged USDC", "usd-coin", "stablecoin"),
    _t("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "DAI", 18, "Dai", "dai", "stablecoin"),
    _t("0x5979D7b546E38E414F7E9822514be443A4800529", "wstETH", 18, "Wrapped stETH", "wrapped-steth", "lsd"),
    _t("0xEC70Dcb4A1EFa46b8F2D97C310C9c4790ba5ffA8", "rETH", 18, "Rocket Pool ETH", "rocket-pool-eth", "lsd"),
    _t("0x912CE59144191C1204E64559FE8253a0e49E6548", "ARB", 18, "Arbitrum", "arbitrum", "layer2"),
    _t("0xf97f4df75117a78c1A5a0DBb814Af92458539FB4", "LINK", 18, "Chainlink", "chainlink"),
)

OPTIMISM_TOKENS = (
    _t("0x4200000000000000000000000000000000000006", "WETH", 18, "Wrapped Ether", "weth"),
    _t("0x68f180fcCe6836688e9084f035309E29Bf0A2095", "WBTC", 8, "Wrapped Bitcoin", "wrapped-bitcoin"),
    _t("0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0x7F5c764cBc14f9669B88837ca1490cCa17c31607", "USDC.e", 6, "Bridged USDC", "usd-coin", "stablecoin"),
    _t("0x94b008aA00579c1307B0EF2c499aD98a8ce58e58", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "DAI", 18, "Dai", "dai", "stablecoin"),
    _t("0x1F32b1c2345538c0c6f582fCB022739c4A194Ebb", "wstETH", 18, "Wrapped stETH", "wrapped-steth", "lsd"),
    _t("0x9Bcef72be871e61ED4fBbc7630889beE758eb81D", "rETH", 18, "Rocket Pool ETH", "rocket-pool-eth", "lsd"),
    _t("0x4200000000000000000000000000000000000042", "OP", 18, "Optimism", "optimism", "layer2"),
)

BASE_TOKENS = (
    _t("0x4200000000000000000000000000000000000006", "WETH", 18, "Wrapped Ether", "weth"),
    _t("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0xd9aAEc86B65D86f6A7B5B1b0c42FFA531710b6CA", "USDbC", 6, "USD Base Coin",
       "bridged-usd-coin-base", "stablecoin"),
    _t("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", "DAI", 18, "Dai", "dai", "stablecoin"),
    _t("0xc1CBa3fCea344f92D9239c08C0568f6F2F0ee452", "wstETH", 18, "Wrapped stETH", "wrapped-steth", "lsd"),
    _t("0x2Ae3F1Ec7F1F5012CFEab0185bfc7aa3cf0DEc22", "cbETH", 18, "Coinbase Wrapped Staked ETH",
       "coinbase-wrapped-staked-eth", "lsd"),
    _t("0xB6fe221Fe9EeF5aBa221c348bA20A1Bf5e73624c", "rETH", 18, "Rocket Pool ETH", "rocket-pool-eth", "lsd"),
    _t("0x940181a94A35A4569E4529A3CDfB74e38FD98631", "AERO", 18, "Aerodrome", "aerodrome-finance", "defi"),
)

POLYGON_TOKENS = (
    _t("0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270", "WPOL", 18, "Wrapped POL", "polygon-ecosystem-token"),
    _t("0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619", "WETH", 18, "Wrapped Ether", "weth"),
    _t("0x1BFD67037B42Cf73acF2047067bd4F2C47D9BfD6", "WBTC", 8, "Wrapped Bitcoin", "wrapped-bitcoin"),
    _t("0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174", "USDC.e", 6, "Bridged USDC", "usd-coin", "stablecoin"),
    _t("0xc2132D05D31c914a87C6611C10748AEb04B58e8F", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("0x8f3Cf7ad23Cd3CaDbD9735AFf958023239c6A063", "DAI", 18, "Dai", "dai", "stablecoin"),
)

AVALANCHE_TOKENS = (
    _t("0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7", "WAVAX", 18, "Wrapped AVAX", "avalanche-2"),
    _t("0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB", "WETH.e", 18, "Bridged Ether", "weth"),
    _t("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("0xd586E7F844cEa2F87f50152665BCbc2C279D8d70", "DAI.e", 18, "Bridged Dai", "dai", "stablecoin"),
)

# BEP-20 stablecoins on BSC use 18 decimals.
BSC_TOKENS = (
    _t("0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c", "WBNB", 18, "Wrapped BNB", "binancecoin"),
    _t("0x2170Ed0880ac9A755fd29B2688956BD959F933F8", "ETH", 18, "Binance-Peg Ether", "ethereum"),
    _t("0x7130d2A12B9BCbFAe4f2634d864A1Ee1Ce3Ead9c", "BTCB", 18, "Binance-Peg BTC", "bitcoin"),
    _t("0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d", "USDC", 18, "USD Coin", "usd-coin", "stablecoin"),
    _t("0x55d398326f99059fF775485246999027B3197955", "USDT", 18, "Tether", "tether", "stablecoin"),
    _t("0x1AF3F329e8BE154074D8769D1FFa4eE058B1DBc3", "DAI", 18, "Dai", "dai", "stablecoin"),
)

SOLANA_TOKENS = (
    _t("So11111111111111111111111111111111111111112", "SOL", 9, "Wrapped SOL", "solana"),
    _t("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC", 6, "USD Coin", "usd-coin", "stablecoin"),
    _t("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", "USDT", 6, "Tether", "tether", "stablecoin"),
    _t("mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So", "mSOL", 9, "Marinade Staked SOL", "msol", "lsd"),
    _t("J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn", "JitoSOL", 9, "Jito Staked SOL",
       "jito-staked-sol", "lsd"),
    _t("JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", "JUP", 6, "Jupiter", "jupiter-exchange-solana"),
    _t("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "BONK", 5, "Bonk", "bonk"),
    _t("HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3", "PYTH", 6, "Pyth Network", "pyth-network"),
)

DEFAULT_TOKENS: dict[ChainId, tuple[TokenInfo, ...]] = {
    1: ETHEREUM_TOKENS,
    42161: ARBITRUM_TOKENS,
    10: OPTIMISM_TOKENS,
    8453: BASE_TOKENS,
    137: POLYGON_TOKENS,
    43114: AVALANCHE_TOKENS,
    56: BSC_TOKENS,
    SOLANA_CHAIN_ID: SOLANA_TOKENS,
}

# CoinGecko ids for chain-native assets
NATIVE_COINGECKO_IDS = {
    "ETH": "ethereum",
    "SOL": "solana",
    "BTC": "bitcoin",
    "POL": "polygon-ecosystem-token",
    "AVAX": "avalanche-2",
    "BNB": "binancecoin",
}


class TokenCatalog:
    """Read-only lookup of known tokens per chain."""

    def __init__(self, tokens: Mapping[ChainId, Iterable[TokenInfo]] | None = None) -> None:
        source = DEFAULT_TOKENS if tokens is None else tokens
        self._tokens: dict[ChainId, tuple[TokenInfo, ...]] = {
            chain_id: tuple(infos) for chain_id, infos in source.items()
        }
        self._by_address: dict[tuple[ChainId, str], TokenInfo] = {}
        for chain_id, infos in self._tokens.items():
            for info in infos:
                self._by_address[(chain_id, self._key(chain_id, info.address))] = info

    @staticmethod
    def _key(chain_id: ChainId, address: str) -> str:
        # Base58 mints are case-sensitive; hex addresses are not.
        return address if chain_id == SOLANA_CHAIN_ID else address.lower()

    def tokens_for_chain(self, chain_id: ChainId) -> tuple[TokenInfo, ...]:
        return self._tokens.get(chain_id, ())

    def get(self, chain_id: ChainId, address: str) -> TokenInfo | None:
        return self._by_address.get((chain_id, self._key(chain_id, address)))

    def find_by_symbol(self, chain_id: ChainId, symbol: str) -> TokenInfo | None:
        wanted = symbol.upper()
        for info in self.tokens_for_chain(chain_id):
            if info.symbol.upper() == wanted:
                return info
        return None

    def coingecko_id(self, chain_id: ChainId, address: str, symbol: str) -> str | None:
        info = self.get(chain_id, address)
        if info and info.coingecko_id:
            return info.coingecko_id
        return NATIVE_COINGECKO_IDS.get(symbol.upper())
