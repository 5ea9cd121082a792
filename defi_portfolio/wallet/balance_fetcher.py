"""Wallet balance fetcher — native and catalog-token balances per chain."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Iterable

from ..chains.evm.client import ContractCall
from ..chains.evm.erc20 import ERC20_ABI
from ..chains.registry import ChainRegistry
from ..chains.solana.client import TOKEN_PROGRAM_ID, aggregate_token_accounts
from ..config import ChainConfig, ChainId
from ..models import NATIVE_TOKEN_ADDRESS, ChainBalances, TokenBalance, WalletBalances
from ..pricing.service import PriceService
from ..tokens.catalog import TokenCatalog

logger = logging.getLogger(__name__)

# Native SOL is reported under the wrapped-SOL mint so it prices like wSOL.
NATIVE_SOL_ADDRESS = "So11111111111111111111111111111111111111112"


class WalletBalanceFetcher:
    """Reads balances through registry failover and prices them.

    Only tokens listed in the catalog are checked. Native and token reads
    fail independently: losing one still returns the other.
    """

    def __init__(
        self,
        chains: ChainRegistry,
        catalog: TokenCatalog,
        prices: PriceService,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chains = chains
        self.catalog = catalog
        self.prices = prices
        self._clock = clock

    async def get_balances(self, address: str, chain_ids: Iterable[ChainId]) -> WalletBalances:
        chain_balances = await asyncio.gather(
            *(self.get_chain_balances(address, chain_id) for chain_id in chain_ids)
        )
        return WalletBalances(
            address=address,
            chains=tuple(chain_balances),
            fetched_at=int(self._clock() * 1000),
        )

    async def get_chain_balances(self, address: str, chain_id: ChainId) -> ChainBalances:
        config = self.chains.get_config(chain_id)
        if config.family == "solana":
            raw = await self._solana_balances(address, config)
        else:
            raw = await self._evm_balances(address, config)

        balances: tuple[TokenBalance, ...] = ()
        if raw:
            balances = await self.prices.price_balances(
                self.chains.get_client(chain_id), chain_id, raw
            )
        return ChainBalances(chain_id=chain_id, chain_name=config.name, balances=balances)

    # ------------------------------------------------------------------
    # EVM
    # ------------------------------------------------------------------

    async def _evm_balances(self, address: str, config: ChainConfig) -> list[TokenBalance]:
        chain_id = config.chain_id
        balances: list[TokenBalance] = []

        try:
            native = await self.chains.with_failover(
                chain_id, lambda client: client.get_balance(address)
            )
        except Exception as e:
            logger.error("[chain %s] Native balance unavailable: %s", chain_id, e)
        else:
            if native > 0:
                balances.append(
                    TokenBalance(
                        NATIVE_TOKEN_ADDRESS, config.native_symbol, config.native_decimals, native
                    )
                )

        tokens = self.catalog.tokens_for_chain(chain_id)
        if not tokens:
            return balances
        calls = [ContractCall(t.address, ERC20_ABI, "balanceOf", (address,)) for t in tokens]

        try:
            results = await self.chains.with_failover(
                chain_id, lambda client: client.multicall(calls)
            )
        except Exception as e:
            logger.error("[chain %s] Token balances unavailable: %s", chain_id, e)
            return balances

        for token, result in zip(tokens, results):
            if not result.success:
                logger.debug("[chain %s] balanceOf failed for %s", chain_id, token.symbol)
                continue
            amount = int(result.value)
            if amount > 0:
                balances.append(TokenBalance(token.address, token.symbol, token.decimals, amount))
        return balances

    # ------------------------------------------------------------------
    # Solana
    # ------------------------------------------------------------------

    async def _solana_balances(self, address: str, config: ChainConfig) -> list[TokenBalance]:
        chain_id = config.chain_id
        balances: list[TokenBalance] = []

        try:
            lamports = await self.chains.with_failover(
                chain_id, lambda client: client.get_balance(address)
            )
        except Exception as e:
            logger.error("[chain %s] Native balance unavailable: %s", chain_id, e)
        else:
            if lamports > 0:
                balances.append(
                    TokenBalance(
                        NATIVE_SOL_ADDRESS, config.native_symbol, config.native_decimals, lamports
                    )
                )

        try:
            accounts: list[dict[str, Any]] = await self.chains.with_failover(
                chain_id,
                lambda client: client.get_token_accounts_by_owner(address, TOKEN_PROGRAM_ID),
            )
        except Exception as e:
            logger.error("[chain %s] Token accounts unavailable: %s", chain_id, e)
            return balances

        for mint, (amount, decimals) in aggregate_token_accounts(accounts).items():
            info = self.catalog.get(chain_id, mint)
            if info is None:
                continue
            balances.append(TokenBalance(mint, info.symbol, decimals, amount))
        return balances
