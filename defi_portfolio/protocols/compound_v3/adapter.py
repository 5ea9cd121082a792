"""Compound V3 (Comet) lending adapter."""
from __future__ import annotations

import logging
from typing import Any

from ...chains.evm.client import ContractCall
from ...config import ChainId
from ...models import Position, ProtocolInfo, TokenBalance, YieldInfo, YieldRate
from ..base import SECONDS_PER_YEAR, WAD, BaseProtocolAdapter
from .addresses import COMET_ABI, COMPOUND_V3_MARKETS, CometMarket

logger = logging.getLogger(__name__)


def supply_rate_to_apy(rate_per_second: int) -> float:
    return int(rate_per_second) * SECONDS_PER_YEAR / WAD


class CompoundV3Adapter(BaseProtocolAdapter):
    protocol = ProtocolInfo(
        id="compound-v3",
        name="Compound V3",
        category="lending",
        website="https://compound.finance",
    )
    supported_chains = frozenset(COMPOUND_V3_MARKETS)

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        """One batched ``userBasic`` read per market.

        A non-zero principal means a supply or borrow; a non-zero
        ``assetsIn`` bitmap means collateral is posted.
        """
        if not self.supports_chain(chain_id):
            return False
        markets = COMPOUND_V3_MARKETS[chain_id]
        try:
            results = await client.multicall(
                [ContractCall(m.comet, COMET_ABI, "userBasic", (address,)) for m in markets]
            )
        except Exception as e:
            logger.warning("[compound-v3] Probe failed on chain %s: %s", chain_id, e)
            return False
        return any(
            r.success and (int(r.value[0]) != 0 or int(r.value[3]) != 0) for r in results
        )

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        positions: list[Position] = []
        for market in COMPOUND_V3_MARKETS[chain_id]:
            try:
                positions.extend(await self._read_market(client, address, chain_id, market, errors))
            except Exception as e:
                errors.append(f"market {market.comet} failed: {e}")
        return positions

    async def _read_market(
        self,
        client: Any,
        address: str,
        chain_id: ChainId,
        market: CometMarket,
        errors: list[str],
    ) -> list[Position]:
        supply, borrow, utilization, num_assets = await client.multicall(
            [
                ContractCall(market.comet, COMET_ABI, "balanceOf", (address,)),
                ContractCall(market.comet, COMET_ABI, "borrowBalanceOf", (address,)),
                ContractCall(market.comet, COMET_ABI, "getUtilization"),
                ContractCall(market.comet, COMET_ABI, "numAssets"),
            ]
        )
        if not (supply.success and borrow.success):
            raise RuntimeError("balance reads reverted")

        decimals = self._token_decimals(chain_id, market.base_token)
        positions: list[Position] = []

        if int(supply.value) > 0:
            yield_info = None
            if utilization.success:
                try:
                    rate = await client.call(
                        market.comet, COMET_ABI, "getSupplyRate", int(utilization.value)
                    )
                except Exception as e:
                    errors.append(f"getSupplyRate failed for {market.comet}: {e}")
                else:
                    apy = supply_rate_to_apy(rate)
                    yield_info = YieldInfo(apy=apy, apr=apy)
            else:
                errors.append(f"getUtilization failed for {market.comet}")
            positions.append(
                Position(
                    id=f"compound-v3-supply-{chain_id}-{market.comet}",
                    protocol=self.protocol,
                    chain_id=chain_id,
                    type="supply",
                    tokens=(
                        TokenBalance(market.base_token, market.base_symbol, decimals, int(supply.value)),
                    ),
                    yield_info=yield_info,
                )
            )

        if int(borrow.value) > 0:
            positions.append(
                Position(
                    id=f"compound-v3-borrow-{chain_id}-{market.comet}",
                    protocol=self.protocol,
                    chain_id=chain_id,
                    type="borrow",
                    tokens=(
                        TokenBalance(market.base_token, market.base_symbol, decimals, int(borrow.value)),
                    ),
                )
            )

        if not num_assets.success:
            errors.append(f"numAssets failed for {market.comet}")
            return positions
        positions.extend(
            await self._read_collateral(
                client, address, chain_id, market, int(num_assets.value), errors
            )
        )
        return positions

    async def _read_collateral(
        self,
        client: Any,
        address: str,
        chain_id: ChainId,
        market: CometMarket,
        num_assets: int,
        errors: list[str],
    ) -> list[Position]:
        infos = await client.multicall(
            [ContractCall(market.comet, COMET_ABI, "getAssetInfo", (i,)) for i in range(num_assets)]
        )
        assets = []
        for index, info in enumerate(infos):
            if info.success:
                assets.append(str(info.value[1]))
            else:
                errors.append(f"getAssetInfo({index}) failed for {market.comet}")

        balances = await client.multicall(
            [ContractCall(market.comet, COMET_ABI, "userCollateral", (address, a)) for a in assets]
        )
        held = [
            (asset, int(result.value[0]))
            for asset, result in zip(assets, balances)
            if result.success and int(result.value[0]) > 0
        ]
        tokens = await self._resolve_tokens(client, chain_id, [asset for asset, _ in held])

        return [
            Position(
                id=f"compound-v3-collateral-{chain_id}-{market.comet}-{asset}",
                protocol=self.protocol,
                chain_id=chain_id,
                type="collateral",
                tokens=(
                    TokenBalance(asset, tokens[asset].symbol, tokens[asset].decimals, amount),
                ),
                metadata={"market": market.base_symbol, "comet": market.comet},
            )
            for asset, amount in held
        ]

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        rates: list[YieldRate] = []
        for market in COMPOUND_V3_MARKETS.get(chain_id, ()):
            try:
                utilization = await client.call(market.comet, COMET_ABI, "getUtilization")
                rate = await client.call(market.comet, COMET_ABI, "getSupplyRate", int(utilization))
            except Exception as e:
                logger.error(
                    "[compound-v3] Failed to fetch %s rate on chain %s: %s",
                    market.base_symbol,
                    chain_id,
                    e,
                )
                continue
            apy = supply_rate_to_apy(rate)
            rates.append(
                YieldRate(
                    protocol=self.protocol.id,
                    chain_id=chain_id,
                    asset=market.base_token,
                    asset_symbol=market.base_symbol,
                    type="supply",
                    apy=apy,
                    apr=apy,
                )
            )
        return rates
