"""Token catalog."""
from .catalog import DEFAULT_TOKENS, NATIVE_COINGECKO_IDS, TokenCatalog, TokenInfo

__all__ = ["DEFAULT_TOKENS", "NATIVE_COINGECKO_IDS", "TokenCatalog", "TokenInfo"]
