"""Protocol adapter protocol — per-protocol position discovery."""
from typing import Any, Protocol

from ..config import ChainId
from ..models import Position, ProtocolInfo, YieldRate


class ProtocolAdapter(Protocol):
    """Uniform contract every DeFi protocol integration implements."""

    protocol: ProtocolInfo
    supported_chains: frozenset[ChainId]

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        """Cheap existence probe; False on any read failure."""
        ...

    async def get_positions(self, client: Any, address: str, chain_id: ChainId) -> list[Position]:
        """Full read; partial results on partial failure, [] on total failure."""
        ...

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]: ...
