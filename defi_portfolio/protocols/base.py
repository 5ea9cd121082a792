"""Base protocol adapter and per-branch result type."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

from ..chains.evm.client import ContractCall
from ..chains.evm.erc20 import ERC20_ABI
from ..config import ChainId
from ..models import Position, ProtocolInfo, YieldRate
from ..tokens.catalog import TokenCatalog

logger = logging.getLogger(__name__)

BranchStatus = Literal["success", "partial", "failure"]

SECONDS_PER_YEAR = 31_536_000
RAY = 10**27
WAD = 10**18
MAX_HEALTH_FACTOR = 1e6


@dataclass(frozen=True)
class TokenMeta:
    symbol: str
    decimals: int


@dataclass(frozen=True)
class BranchResult:
    """Outcome of one (adapter, chain) read, consumed by the aggregator."""

    adapter_id: str
    chain_id: ChainId
    status: BranchStatus
    positions: tuple[Position, ...] = ()
    errors: tuple[str, ...] = ()


def sanitize_health_factor(value: float | None) -> float | None:
    """Drop health factors that are not meaningful (no debt reports ~uint256 max)."""
    if value is None or not 0 < value < MAX_HEALTH_FACTOR:
        return None
    return value


class BaseProtocolAdapter(ABC):
    """Shared behaviour for protocol adapters.

    Subclasses implement ``_read_positions``, appending a message to
    ``errors`` for every sub-read they had to skip. ``get_positions`` and
    ``collect_positions`` never raise.
    """

    protocol: ProtocolInfo
    supported_chains: frozenset[ChainId] = frozenset()

    def __init__(self, catalog: TokenCatalog | None = None) -> None:
        self.catalog = catalog or TokenCatalog()

    @property
    def id(self) -> str:
        return self.protocol.id

    def supports_chain(self, chain_id: ChainId) -> bool:
        return chain_id in self.supported_chains

    @abstractmethod
    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]: ...

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        """Default probe: run the full read. Override with a cheaper check where one exists."""
        if not self.supports_chain(chain_id):
            return False
        try:
            return bool(await self._read_positions(client, address, chain_id, []))
        except Exception as e:
            logger.warning("[%s] Probe failed on chain %s: %s", self.id, chain_id, e)
            return False

    async def get_positions(self, client: Any, address: str, chain_id: ChainId) -> list[Position]:
        result = await self.collect_positions(client, address, chain_id)
        return list(result.positions)

    async def collect_positions(
        self, client: Any, address: str, chain_id: ChainId
    ) -> BranchResult:
        if not self.supports_chain(chain_id):
            return BranchResult(self.id, chain_id, "success")

        errors: list[str] = []
        try:
            positions = await self._read_positions(client, address, chain_id, errors)
        except Exception as e:
            logger.error("[%s] Failed to read positions on chain %s: %s", self.id, chain_id, e)
            return BranchResult(self.id, chain_id, "failure", errors=(*errors, str(e)))

        for message in errors:
            logger.warning("[%s] chain %s: %s", self.id, chain_id, message)
        status: BranchStatus = "partial" if errors else "success"
        return BranchResult(self.id, chain_id, status, tuple(positions), tuple(errors))

    async def get_yield_rates(self, client: Any, chain_id: ChainId) -> list[YieldRate]:
        return []

    # ------------------------------------------------------------------
    # Token metadata helpers
    # ------------------------------------------------------------------

    def _token_decimals(self, chain_id: ChainId, address: str, default: int = 18) -> int:
        info = self.catalog.get(chain_id, address)
        return info.decimals if info else default

    async def _resolve_tokens(
        self, client: Any, chain_id: ChainId, addresses: list[str]
    ) -> dict[str, TokenMeta]:
        """Symbol and decimals per token: catalog first, then one batched on-chain read."""
        tokens: dict[str, TokenMeta] = {}
        missing: list[str] = []
        for address in addresses:
            info = self.catalog.get(chain_id, address)
            if info:
                tokens[address] = TokenMeta(info.symbol, info.decimals)
            elif address not in missing:
                missing.append(address)
        if not missing:
            return tokens

        calls = []
        for address in missing:
            calls.append(ContractCall(address, ERC20_ABI, "symbol"))
            calls.append(ContractCall(address, ERC20_ABI, "decimals"))
        try:
            results = await client.multicall(calls)
        except Exception as e:
            logger.debug("[%s] Token metadata lookup failed: %s", self.id, e)
            results = []

        for index, address in enumerate(missing):
            pair = results[2 * index : 2 * index + 2]
            symbol, decimals = "UNKNOWN", 18
            if len(pair) == 2:
                if pair[0].success:
                    symbol = str(pair[0].value)
                if pair[1].success:
                    decimals = int(pair[1].value)
            tokens[address] = TokenMeta(symbol, decimals)
        return tokens
