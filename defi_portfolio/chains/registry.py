"""Chain registry — per-chain config lookup, client memoization and RPC failover."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping, TypeVar

from ..config import ChainConfig, ChainId
from ..interfaces.chain import ChainClient
from .evm.client import EvmClient
from .solana.client import SolanaClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[ChainConfig, str], Any]


class UnknownChainError(KeyError):
    """Raised for a chain id that is not registered."""


def default_client_factory(config: ChainConfig, rpc_url: str) -> ChainClient:
    if config.family == "solana":
        return SolanaClient(config, rpc_url)
    return EvmClient(config, rpc_url)


class ChainRegistry:
    """Holds chain configs and hands out RPC clients.

    ``get_client`` memoizes a client on the primary endpoint.
    ``with_failover`` walks every endpoint in declared order, building a
    fresh client for each, and re-raises the last error on exhaustion.
    """

    def __init__(
        self,
        chains: Mapping[ChainId, ChainConfig] | Iterable[ChainConfig],
        client_factory: ClientFactory | None = None,
    ) -> None:
        configs = chains.values() if isinstance(chains, Mapping) else chains
        self._chains: dict[ChainId, ChainConfig] = {c.chain_id: c for c in configs}
        self._client_factory = client_factory or default_client_factory
        self._clients: dict[ChainId, Any] = {}

    def get_config(self, chain_id: ChainId) -> ChainConfig:
        try:
            return self._chains[chain_id]
        except KeyError:
            raise UnknownChainError(f"Chain {chain_id} not registered") from None

    def is_supported(self, chain_id: ChainId) -> bool:
        return chain_id in self._chains

    def chain_name(self, chain_id: ChainId) -> str:
        config = self._chains.get(chain_id)
        return config.name if config else f"Chain {chain_id}"

    def supported_chain_ids(self, family: str | None = None) -> list[ChainId]:
        return [
            chain_id
            for chain_id, config in self._chains.items()
            if family is None or config.family == family
        ]

    def get_client(self, chain_id: ChainId) -> Any:
        """Return the memoized client bound to the chain's primary RPC URL."""
        if chain_id not in self._clients:
            config = self.get_config(chain_id)
            logger.debug("[chain %s] Using RPC: %s", chain_id, config.primary_rpc)
            self._clients[chain_id] = self._client_factory(config, config.primary_rpc)
        return self._clients[chain_id]

    async def with_failover(
        self, chain_id: ChainId, operation: Callable[[Any], Awaitable[T]]
    ) -> T:
        """Run ``operation`` against each RPC endpoint until one succeeds."""
        config = self.get_config(chain_id)

        last_error: Exception | None = None
        for index, rpc_url in enumerate(config.rpc_endpoints):
            client = self._client_factory(config, rpc_url)
            try:
                result = await operation(client)
            except Exception as e:
                last_error = e
                logger.warning("[chain %s] RPC endpoint %s failed: %s", chain_id, rpc_url, e)
                continue

            if index > 0:
                logger.info("[chain %s] Served by fallback endpoint %s", chain_id, rpc_url)
            return result

        if last_error is None:
            raise UnknownChainError(f"Chain {chain_id} has no RPC endpoints")
        raise last_error

    async def health_check(self, chain_id: ChainId) -> bool:
        """True if any endpoint answers a block-height query."""
        try:
            await self.with_failover(chain_id, lambda client: client.get_block_height())
            return True
        except Exception as e:
            logger.error("[chain %s] Health check failed: %s", chain_id, e)
            return False

    async def close(self) -> None:
        for chain_id, client in list(self._clients.items()):
            try:
                await client.close()
            except Exception as e:
                logger.debug("[chain %s] Error closing client: %s", chain_id, e)
        self._clients.clear()
