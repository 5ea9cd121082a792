"""Rocket Pool liquid staking adapter."""
from __future__ import annotations

import logging
from typing import Any

from ...config import ChainId
from ...models import Position, ProtocolInfo, TokenBalance, YieldInfo, YieldRate, format_units
from ..base import BaseProtocolAdapter
from .addresses import RETH_ABI, RETH_ADDRESSES, ROCKET_POOL_ESTIMATED_APR

logger = logging.getLogger(__name__)


class RocketPoolAdapter(BaseProtocolAdapter):
    protocol = ProtocolInfo(
        id="rocket-pool",
        name="Rocket Pool",
        category="liquid-staking",
        website="https://rocketpool.net",
    )
    supported_chains = frozenset(RETH_ADDRESSES)

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        if not self.supports_chain(chain_id):
            return False
        try:
            balance = await client.call(RETH_ADDRESSES[chain_id], RETH_ABI, "balanceOf", address)
        except Exception as e:
            logger.warning("[rocket-pool] Probe failed on chain %s: %s", chain_id, e)
            return False
        return int(balance) > 0

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        reth = RETH_ADDRESSES[chain_id]
        balance = int(await client.call(reth, RETH_ABI, "balanceOf", address))
        if balance <= 0:
            return []

        metadata: dict[str, Any] = {}
        # Exchange rate is only readable on the mainnet token contract
        if chain_id == 1:
            try:
                eth_value = await client.call(reth, RETH_ABI, "getEthValue", balance)
                metadata["underlying_eth"] = format_units(int(eth_value), 18)
            except Exception as e:
                errors.append(f"getEthValue failed: {e}")

        return [
            Position(
                id=f"rocket-pool-reth-{chain_id}",
                protocol=self.protocol,
                chain_id=chain_id,
                type="stake",
                tokens=(TokenBalance(reth, "rETH", 18, balance),),
                yield_info=YieldInfo(apy=ROCKET_POOL_ESTIMATED_APR, apr=ROCKET_POOL_ESTIMATED_APR),
                metadata=metadata,
            )
        ]

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        if not self.supports_chain(chain_id):
            return []
        return [
            YieldRate(
                protocol=self.protocol.id,
                chain_id=chain_id,
                asset=RETH_ADDRESSES[chain_id],
                asset_symbol="rETH",
                type="stake",
                apy=ROCKET_POOL_ESTIMATED_APR,
                apr=ROCKET_POOL_ESTIMATED_APR,
            )
        ]
