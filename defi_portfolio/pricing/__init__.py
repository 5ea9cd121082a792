"""Price resolution: tiered lookup, TTL cache and market API rate limiting."""
from .assets import EQUIVALENCE_CLASSES, STABLECOINS, is_equivalent_asset, is_stablecoin
from .cache import TTLCache
from .coingecko import PLATFORM_IDS, CoinGeckoClient
from .rate_limiter import TokenBucket
from .service import PriceService, price_key

__all__ = [
    "EQUIVALENCE_CLASSES",
    "PLATFORM_IDS",
    "STABLECOINS",
    "CoinGeckoClient",
    "PriceService",
    "TTLCache",
    "TokenBucket",
    "is_equivalent_asset",
    "is_stablecoin",
    "price_key",
]
