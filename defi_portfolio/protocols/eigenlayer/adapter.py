"""EigenLayer restaking adapter (mainnet LST strategies)."""
from __future__ import annotations

import logging
from typing import Any

from ...chains.evm.client import ContractCall
from ...config import ChainId
from ...models import Position, ProtocolInfo, TokenBalance
from ..base import BaseProtocolAdapter
from .addresses import (
    DELEGATION_MANAGER,
    DELEGATION_MANAGER_ABI,
    STRATEGIES,
    STRATEGY_ABI,
    STRATEGY_MANAGER,
    STRATEGY_MANAGER_ABI,
)

logger = logging.getLogger(__name__)


class EigenLayerAdapter(BaseProtocolAdapter):
    """Restaked LST shares. Rewards are paid out by AVS operators, so no rates."""

    protocol = ProtocolInfo(
        id="eigenlayer",
        name="EigenLayer",
        category="restaking",
        website="https://eigenlayer.xyz",
    )
    supported_chains = frozenset({1})

    async def _shares(self, client: Any, address: str) -> list[Any]:
        return await client.multicall(
            [
                ContractCall(
                    STRATEGY_MANAGER, STRATEGY_MANAGER_ABI, "stakerStrategyShares", (address, s.address)
                )
                for s in STRATEGIES
            ]
        )

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        if not self.supports_chain(chain_id):
            return False
        try:
            results = await self._shares(client, address)
        except Exception as e:
            logger.warning("[eigenlayer] Probe failed on chain %s: %s", chain_id, e)
            return False
        return any(r.success and int(r.value) > 0 for r in results)

    async def _delegated_to(self, client: Any, address: str) -> str | None:
        if not await client.call(DELEGATION_MANAGER, DELEGATION_MANAGER_ABI, "isDelegated", address):
            return None
        return str(await client.call(DELEGATION_MANAGER, DELEGATION_MANAGER_ABI, "delegatedTo", address))

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        active = []
        for strategy, result in zip(STRATEGIES, await self._shares(client, address)):
            if not result.success:
                errors.append(f"stakerStrategyShares failed for {strategy.symbol}")
            elif int(result.value) > 0:
                active.append((strategy, int(result.value)))
        if not active:
            return []

        underlying = await client.multicall(
            [
                ContractCall(strategy.address, STRATEGY_ABI, "sharesToUnderlyingView", (shares,))
                for strategy, shares in active
            ]
        )

        delegated_to = None
        try:
            delegated_to = await self._delegated_to(client, address)
        except Exception as e:
            errors.append(f"delegation lookup failed: {e}")

        tokens = await self._resolve_tokens(
            client, chain_id, [strategy.underlying_token for strategy, _ in active]
        )

        positions: list[Position] = []
        for (strategy, shares), amount in zip(active, underlying):
            if not amount.success:
                errors.append(f"sharesToUnderlyingView failed for {strategy.symbol}")
                continue
            metadata: dict[str, Any] = {
                "strategy_name": strategy.name,
                "strategy_address": strategy.address,
                "shares": str(shares),
            }
            if delegated_to:
                metadata["delegated_to"] = delegated_to
            positions.append(
                Position(
                    id=f"eigenlayer-{strategy.symbol.lower()}-{chain_id}",
                    protocol=self.protocol,
                    chain_id=chain_id,
                    type="restake",
                    tokens=(
                        TokenBalance(
                            strategy.underlying_token,
                            strategy.symbol,
                            tokens[strategy.underlying_token].decimals,
                            int(amount.value),
                        ),
                    ),
                    metadata=metadata,
                )
            )
        return positions
