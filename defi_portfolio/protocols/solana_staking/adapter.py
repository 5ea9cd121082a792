"""Solana liquid staking adapters, detected from wallet token accounts."""
from __future__ import annotations

from typing import Any

from ...chains.solana.client import TOKEN_PROGRAM_ID, aggregate_token_accounts
from ...config import SOLANA_CHAIN_ID, ChainId
from ...models import Position, ProtocolInfo, TokenBalance, YieldInfo, YieldRate
from ..base import BaseProtocolAdapter
from .addresses import JITO_ESTIMATED_APY, JITOSOL_MINT, MARINADE_ESTIMATED_APY, MSOL_MINT


class SolanaLiquidStakingAdapter(BaseProtocolAdapter):
    """One LST mint held directly in the wallet counts as a stake position.

    The default probe (full read) is already a single RPC call here.
    """

    mint: str
    symbol: str
    estimated_apy: float
    supported_chains = frozenset({SOLANA_CHAIN_ID})

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        accounts = await client.get_token_accounts_by_owner(address, TOKEN_PROGRAM_ID)
        held = aggregate_token_accounts(accounts).get(self.mint)
        if held is None:
            return []

        amount, decimals = held
        return [
            Position(
                id=f"{self.protocol.id}-stake-{chain_id}",
                protocol=self.protocol,
                chain_id=chain_id,
                type="stake",
                tokens=(TokenBalance(self.mint, self.symbol, decimals, amount),),
                yield_info=YieldInfo(apy=self.estimated_apy, apr=self.estimated_apy),
            )
        ]

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        if not self.supports_chain(chain_id):
            return []
        return [
            YieldRate(
                protocol=self.protocol.id,
                chain_id=chain_id,
                asset=self.mint,
                asset_symbol=self.symbol,
                type="stake",
                apy=self.estimated_apy,
                apr=self.estimated_apy,
            )
        ]


class MarinadeAdapter(SolanaLiquidStakingAdapter):
    protocol = ProtocolInfo(
        id="marinade",
        name="Marinade Finance",
        category="liquid-staking",
        website="https://marinade.finance",
    )
    mint = MSOL_MINT
    symbol = "mSOL"
    estimated_apy = MARINADE_ESTIMATED_APY


class JitoAdapter(SolanaLiquidStakingAdapter):
    protocol = ProtocolInfo(
        id="jito",
        name="Jito",
        category="liquid-staking",
        website="https://jito.network",
    )
    mint = JITOSOL_MINT
    symbol = "JitoSOL"
    estimated_apy = JITO_ESTIMATED_APY
