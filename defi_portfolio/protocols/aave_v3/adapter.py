"""Aave V3 lending adapter."""
from __future__ import annotations

import logging
from typing import Any

from ...chains.evm.client import CallResult, ContractCall
from ...config import ChainId
from ...models import Position, ProtocolInfo, YieldRate
from ..base import BaseProtocolAdapter
from . import parser
from .addresses import AAVE_V3_ADDRESSES, DATA_PROVIDER_ABI, POOL_ABI, AaveDeployment

logger = logging.getLogger(__name__)


def _holds_reserve(data: Any) -> bool:
    # aToken, stable debt and variable debt balances
    return int(data[0]) > 0 or int(data[1]) > 0 or int(data[2]) > 0


class AaveV3Adapter(BaseProtocolAdapter):
    """Reads Aave V3 style pools through the pool data provider.

    Forks sharing the Aave V3 ABI subclass this with their own
    ``protocol`` and ``deployments``.
    """

    protocol = ProtocolInfo(
        id="aave-v3",
        name="Aave V3",
        category="lending",
        website="https://aave.com",
    )
    deployments: dict[ChainId, AaveDeployment] = AAVE_V3_ADDRESSES
    supported_chains = frozenset(AAVE_V3_ADDRESSES)

    async def _account_data(self, client: Any, address: str, chain_id: ChainId) -> Any:
        deployment = self.deployments[chain_id]
        return await client.call(deployment.pool, POOL_ABI, "getUserAccountData", address)

    async def _reserves(self, client: Any, chain_id: ChainId) -> list[tuple[str, str]]:
        deployment = self.deployments[chain_id]
        reserves = await client.call(
            deployment.data_provider, DATA_PROVIDER_ABI, "getAllReservesTokens"
        )
        return [(str(symbol), str(token)) for symbol, token in reserves]

    async def _user_reserves(
        self, client: Any, address: str, chain_id: ChainId
    ) -> list[tuple[str, str, CallResult]]:
        deployment = self.deployments[chain_id]
        reserves = await self._reserves(client, chain_id)
        results = await client.multicall(
            [
                ContractCall(
                    deployment.data_provider,
                    DATA_PROVIDER_ABI,
                    "getUserReserveData",
                    (token, address),
                )
                for _, token in reserves
            ]
        )
        return [(symbol, token, result) for (symbol, token), result in zip(reserves, results)]

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        """Account totals first, then per-reserve balances.

        ``totalCollateralBase`` only counts reserves enabled as collateral,
        so an all-zero account can still hold a plain supply.
        """
        if not self.supports_chain(chain_id):
            return False
        try:
            account_data = await self._account_data(client, address, chain_id)
            if int(account_data[0]) > 0 or int(account_data[1]) > 0:
                return True
            reserves = await self._user_reserves(client, address, chain_id)
        except Exception as e:
            logger.warning("[%s] Probe failed on chain %s: %s", self.id, chain_id, e)
            return False
        return any(result.success and _holds_reserve(result.value) for _, _, result in reserves)

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        reserves = await self._user_reserves(client, address, chain_id)

        health_factor = None
        try:
            health_factor = parser.parse_health_factor(
                await self._account_data(client, address, chain_id)
            )
        except Exception as e:
            errors.append(f"getUserAccountData failed: {e}")

        held: list[tuple[str, str, Any]] = []
        for symbol, token, result in reserves:
            if not result.success:
                errors.append(f"getUserReserveData failed for {symbol}")
                continue
            if _holds_reserve(result.value):
                held.append((symbol, token, result.value))

        tokens = await self._resolve_tokens(client, chain_id, [token for _, token, _ in held])

        positions: list[Position] = []
        for symbol, token, data in held:
            try:
                positions.extend(
                    parser.parse_user_reserve(
                        self.protocol, chain_id, symbol, token, tokens[token].decimals, data, health_factor
                    )
                )
            except (IndexError, TypeError, ValueError) as e:
                errors.append(f"Could not decode reserve {symbol}: {e}")
        return positions

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        if not self.supports_chain(chain_id):
            return []
        deployment = self.deployments[chain_id]
        try:
            reserves = await self._reserves(client, chain_id)
            results = await client.multicall(
                [
                    ContractCall(deployment.data_provider, DATA_PROVIDER_ABI, "getReserveData", (token,))
                    for _, token in reserves
                ]
            )
        except Exception as e:
            logger.error("[%s] Failed to fetch yield rates on chain %s: %s", self.id, chain_id, e)
            return []

        rates: list[YieldRate] = []
        for (symbol, token), result in zip(reserves, results):
            if not result.success:
                continue
            rate = parser.ray_to_rate(result.value[5])
            rates.append(
                YieldRate(
                    protocol=self.protocol.id,
                    chain_id=chain_id,
                    asset=token,
                    asset_symbol=symbol,
                    type="supply",
                    apy=rate,
                    apr=rate,
                )
            )
        return rates
