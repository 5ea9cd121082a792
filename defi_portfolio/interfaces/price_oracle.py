"""Price oracle protocol — price feed abstraction."""
from typing import Any, Protocol

from ..config import ChainId


class PriceOracle(Protocol):
    """Oracle tier of the price resolution service."""

    async def get_price(self, client: Any, symbol: str, chain_id: ChainId) -> float | None: ...
