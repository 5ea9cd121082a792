"""Lido liquid staking adapter (stETH on mainnet, wstETH everywhere)."""
from __future__ import annotations

import logging
from typing import Any

from ...chains.evm.client import ContractCall
from ...chains.evm.erc20 import ERC20_ABI
from ...config import ChainId
from ...models import Position, ProtocolInfo, TokenBalance, YieldInfo, YieldRate, format_units
from ..base import BaseProtocolAdapter
from .addresses import LIDO_ESTIMATED_APR, STETH_ADDRESS, WSTETH_ABI, WSTETH_ADDRESSES

logger = logging.getLogger(__name__)


class LidoAdapter(BaseProtocolAdapter):
    protocol = ProtocolInfo(
        id="lido",
        name="Lido",
        category="liquid-staking",
        website="https://lido.fi",
    )
    supported_chains = frozenset(WSTETH_ADDRESSES)

    def _balance_calls(self, address: str, chain_id: ChainId) -> list[ContractCall]:
        calls = [ContractCall(WSTETH_ADDRESSES[chain_id], ERC20_ABI, "balanceOf", (address,))]
        if chain_id == 1:
            calls.append(ContractCall(STETH_ADDRESS, ERC20_ABI, "balanceOf", (address,)))
        return calls

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        if not self.supports_chain(chain_id):
            return False
        try:
            results = await client.multicall(self._balance_calls(address, chain_id))
        except Exception as e:
            logger.warning("[lido] Probe failed on chain %s: %s", chain_id, e)
            return False
        return any(r.success and int(r.value) > 0 for r in results)

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        wsteth = WSTETH_ADDRESSES[chain_id]
        results = await client.multicall(self._balance_calls(address, chain_id))
        yield_info = YieldInfo(apy=LIDO_ESTIMATED_APR, apr=LIDO_ESTIMATED_APR)
        positions: list[Position] = []

        if len(results) > 1:
            steth = results[1]
            if not steth.success:
                errors.append("stETH balanceOf failed")
            elif int(steth.value) > 0:
                positions.append(
                    Position(
                        id=f"lido-steth-{chain_id}",
                        protocol=self.protocol,
                        chain_id=chain_id,
                        type="stake",
                        tokens=(TokenBalance(STETH_ADDRESS, "stETH", 18, int(steth.value)),),
                        yield_info=yield_info,
                    )
                )

        wrapped = results[0]
        if not wrapped.success:
            errors.append("wstETH balanceOf failed")
        elif int(wrapped.value) > 0:
            balance = int(wrapped.value)
            metadata: dict[str, Any] = {}
            if chain_id == 1:
                try:
                    underlying = await client.call(wsteth, WSTETH_ABI, "getStETHByWstETH", balance)
                    metadata["underlying_steth"] = format_units(int(underlying), 18)
                except Exception as e:
                    errors.append(f"getStETHByWstETH failed: {e}")
            positions.append(
                Position(
                    id=f"lido-wsteth-{chain_id}",
                    protocol=self.protocol,
                    chain_id=chain_id,
                    type="stake",
                    tokens=(TokenBalance(wsteth, "wstETH", 18, balance),),
                    yield_info=yield_info,
                    metadata=metadata,
                )
            )
        return positions

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        if not self.supports_chain(chain_id):
            return []
        # Same estimated APR on every chain
        return [
            YieldRate(
                protocol=self.protocol.id,
                chain_id=chain_id,
                asset=WSTETH_ADDRESSES[chain_id],
                asset_symbol="wstETH",
                type="stake",
                apy=LIDO_ESTIMATED_APR,
                apr=LIDO_ESTIMATED_APR,
            )
        ]
