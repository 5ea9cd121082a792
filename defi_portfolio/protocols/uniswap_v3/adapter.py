"""Uniswap V3 concentrated liquidity adapter."""
from __future__ import annotations

import logging
from typing import Any

from ...chains.evm.client import ContractCall
from ...config import ChainId
from ...models import NATIVE_TOKEN_ADDRESS, Position, ProtocolInfo, TokenBalance
from ..base import BaseProtocolAdapter
from . import parser
from .addresses import FACTORY_ABI, POOL_ABI, POSITION_MANAGER_ABI, UNISWAP_V3_ADDRESSES

logger = logging.getLogger(__name__)


class UniswapV3Adapter(BaseProtocolAdapter):
    """LP NFTs. Fee income varies with volume, so no rates are published."""

    protocol = ProtocolInfo(
        id="uniswap-v3",
        name="Uniswap V3",
        category="dex",
        earns_yield=False,
        website="https://uniswap.org",
    )
    supported_chains = frozenset(UNISWAP_V3_ADDRESSES)

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        if not self.supports_chain(chain_id):
            return False
        manager = UNISWAP_V3_ADDRESSES[chain_id].position_manager
        try:
            balance = await client.call(manager, POSITION_MANAGER_ABI, "balanceOf", address)
        except Exception as e:
            logger.warning("[uniswap-v3] Probe failed on chain %s: %s", chain_id, e)
            return False
        return int(balance) > 0

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        deployment = UNISWAP_V3_ADDRESSES[chain_id]
        manager = deployment.position_manager

        count = int(await client.call(manager, POSITION_MANAGER_ABI, "balanceOf", address))
        if count == 0:
            return []

        id_results = await client.multicall(
            [
                ContractCall(manager, POSITION_MANAGER_ABI, "tokenOfOwnerByIndex", (address, i))
                for i in range(count)
            ]
        )
        token_ids = [int(r.value) for r in id_results if r.success]
        if len(token_ids) < count:
            errors.append(f"{count - len(token_ids)} tokenOfOwnerByIndex reads failed")

        position_results = await client.multicall(
            [ContractCall(manager, POSITION_MANAGER_ABI, "positions", (t,)) for t in token_ids]
        )

        nfts: list[parser.NftPosition] = []
        for token_id, result in zip(token_ids, position_results):
            if not result.success:
                errors.append(f"positions({token_id}) failed")
                continue
            nft = parser.parse_position(token_id, result.value)
            if not nft.is_empty:
                nfts.append(nft)
        if not nfts:
            return []

        tokens = await self._resolve_tokens(
            client, chain_id, [a for nft in nfts for a in (nft.token0, nft.token1)]
        )

        positions: list[Position] = []
        for nft in nfts:
            slot0 = None
            try:
                slot0 = await self._slot0(client, deployment.factory, nft)
            except Exception as e:
                errors.append(f"pool state for #{nft.token_id} unavailable: {e}")

            amount0, amount1 = 0, 0
            current_tick = None
            if slot0 is not None:
                current_tick = int(slot0[1])
                amount0, amount1 = parser.principal_amounts(
                    nft.liquidity, int(slot0[0]), nft.tick_lower, nft.tick_upper
                )

            meta0, meta1 = tokens[nft.token0], tokens[nft.token1]
            positions.append(
                Position(
                    id=f"uniswap-v3-{chain_id}-{nft.token_id}",
                    protocol=self.protocol,
                    chain_id=chain_id,
                    type="liquidity",
                    tokens=(
                        TokenBalance(nft.token0, meta0.symbol, meta0.decimals, amount0 + nft.tokens_owed0),
                        TokenBalance(nft.token1, meta1.symbol, meta1.decimals, amount1 + nft.tokens_owed1),
                    ),
                    metadata={
                        "token_id": str(nft.token_id),
                        "fee": nft.fee / 10000,
                        "tick_lower": nft.tick_lower,
                        "tick_upper": nft.tick_upper,
                        "current_tick": current_tick,
                        "in_range": (
                            parser.in_range(current_tick, nft.tick_lower, nft.tick_upper)
                            if current_tick is not None
                            else None
                        ),
                        "liquidity": str(nft.liquidity),
                        "uncollected_fees": (str(nft.tokens_owed0), str(nft.tokens_owed1)),
                    },
                )
            )
        return positions

    async def _slot0(self, client: Any, factory: str, nft: parser.NftPosition) -> Any | None:
        pool = await client.call(factory, FACTORY_ABI, "getPool", nft.token0, nft.token1, nft.fee)
        if str(pool).lower() == NATIVE_TOKEN_ADDRESS:
            return None
        return await client.call(str(pool), POOL_ABI, "slot0")
