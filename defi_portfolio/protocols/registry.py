"""Protocol registry — lookup of adapters by chain, id and category."""
from __future__ import annotations

from typing import Iterable

from ..config import ChainId
from ..tokens.catalog import TokenCatalog
from .aave_v3 import AaveV3Adapter
from .base import BaseProtocolAdapter
from .compound_v3 import CompoundV3Adapter
from .eigenlayer import EigenLayerAdapter
from .lido import LidoAdapter
from .rocket_pool import RocketPoolAdapter
from .solana_staking import JitoAdapter, MarinadeAdapter
from .spark import SparkAdapter
from .uniswap_v3 import UniswapV3Adapter


class ProtocolRegistry:
    def __init__(self, adapters: Iterable[BaseProtocolAdapter] = ()) -> None:
        self._adapters: dict[str, BaseProtocolAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: BaseProtocolAdapter) -> None:
        protocol_id = adapter.protocol.id
        if protocol_id in self._adapters:
            raise ValueError(f"Adapter '{protocol_id}' is already registered")
        self._adapters[protocol_id] = adapter

    def get_adapter(self, protocol_id: str) -> BaseProtocolAdapter | None:
        return self._adapters.get(protocol_id)

    def all_adapters(self) -> list[BaseProtocolAdapter]:
        return list(self._adapters.values())

    def get_adapters_for_chain(self, chain_id: ChainId) -> list[BaseProtocolAdapter]:
        return [a for a in self._adapters.values() if chain_id in a.supported_chains]

    def get_adapters_by_category(self, category: str) -> list[BaseProtocolAdapter]:
        return [a for a in self._adapters.values() if a.protocol.category == category]

    def __len__(self) -> int:
        return len(self._adapters)


def build_default_registry(catalog: TokenCatalog | None = None) -> ProtocolRegistry:
    """Registry holding every built-in adapter."""
    catalog = catalog or TokenCatalog()
    return ProtocolRegistry(
        [
            AaveV3Adapter(catalog),
            CompoundV3Adapter(catalog),
            SparkAdapter(catalog),
            LidoAdapter(catalog),
            RocketPoolAdapter(catalog),
            EigenLayerAdapter(catalog),
            UniswapV3Adapter(catalog),
            MarinadeAdapter(catalog),
            JitoAdapter(catalog),
        ]
    )
