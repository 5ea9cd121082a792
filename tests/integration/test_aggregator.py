"""Integration tests for portfolio aggregation."""
from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from defi_portfolio.chains.evm.client import CallResult
from defi_portfolio.chains.registry import ChainRegistry
from defi_portfolio.config import AppConfig, ChainId, PortfolioConfig, PricingConfig
from defi_portfolio.models import (
    ChainBalances,
    Position,
    ProtocolInfo,
    TokenBalance,
    WalletBalances,
    YieldInfo,
)
from defi_portfolio.pricing.service import PriceService
from defi_portfolio.protocols.base import BaseProtocolAdapter
from defi_portfolio.protocols.lido.adapter import LidoAdapter
from defi_portfolio.protocols.registry import ProtocolRegistry
from defi_portfolio.services.aggregator import PortfolioAggregator, RequestTimeoutError
from defi_portfolio.tokens.catalog import TokenCatalog, TokenInfo
from defi_portfolio.validation import ValidationError
from defi_portfolio.wallet.balance_fetcher import WalletBalanceFetcher

EVM_WALLET = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
SOLANA_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
WSTETH = "0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0"


class FakeAdapter(BaseProtocolAdapter):
    """Adapter answering from canned data; ``read`` may be an exception."""

    def __init__(
        self,
        protocol_id: str,
        chains: set[ChainId],
        probe: Any = True,
        read: Any = (),
        errors: tuple[str, ...] = (),
    ) -> None:
        super().__init__(TokenCatalog({}))
        self.protocol = ProtocolInfo(id=protocol_id, name=protocol_id.title(), category="lending")
        self.supported_chains = frozenset(chains)
        self._probe = probe
        self._read = read
        self._errors = errors
        self.reads = 0

    async def has_positions(self, client: Any, address: str, chain_id: ChainId) -> bool:
        if isinstance(self._probe, Exception):
            raise self._probe
        return bool(self._probe)

    async def _read_positions(
        self, client: Any, address: str, chain_id: ChainId, errors: list[str]
    ) -> list[Position]:
        self.reads += 1
        if isinstance(self._read, Exception):
            raise self._read
        errors.extend(self._errors)
        return [p for p in self._read if p.chain_id == chain_id]


def _position(
    protocol_id: str, chain_id: ChainId, kind: str = "supply", amount: int = 1_000 * 10**6
) -> Position:
    return Position(
        id=f"{protocol_id}-{kind}-{chain_id}",
        protocol=ProtocolInfo(id=protocol_id, name=protocol_id.title(), category="lending"),
        chain_id=chain_id,
        type=kind,
        tokens=(TokenBalance(USDC, "USDC", 6, amount),),
        yield_info=YieldInfo(0.03, 0.03) if kind == "supply" else None,
    )


def _price_at_one() -> MagicMock:
    prices = MagicMock()

    async def price_positions(positions, client_for_chain):
        return [p.with_tokens(tuple(t.with_price(1.0) for t in p.tokens)) for p in positions]

    prices.price_positions = AsyncMock(side_effect=price_positions)
    return prices


def _empty_wallet() -> AsyncMock:
    balances = AsyncMock()

    async def get_balances(address, chain_ids):
        return WalletBalances(
            address=address,
            chains=tuple(ChainBalances(c, f"Chain {c}") for c in chain_ids),
        )

    balances.get_balances.side_effect = get_balances
    return balances


@pytest.fixture()
def chains(sample_app_config: AppConfig) -> ChainRegistry:
    return ChainRegistry(sample_app_config.chains, MagicMock(return_value=AsyncMock()))


def _aggregator(
    chains: ChainRegistry,
    adapters: list[BaseProtocolAdapter],
    clock,
    balances: Any = None,
    config: PortfolioConfig | None = None,
) -> PortfolioAggregator:
    return PortfolioAggregator(
        chains,
        ProtocolRegistry(adapters),
        balances or _empty_wallet(),
        _price_at_one(),
        config or PortfolioConfig(request_timeout_seconds=5, result_cache_ttl_seconds=60),
        clock=clock,
    )


class TestWalletOnlyPortfolio:
    @pytest.mark.asyncio
    async def test_eth_and_stablecoin_total(
        self, sample_app_config: AppConfig, clock
    ) -> None:
        """1 ETH at $2500 plus 10,000 USDC, no protocol positions."""
        client = AsyncMock()
        client.get_balance.return_value = 10**18
        client.multicall.return_value = [CallResult(True, 10_000 * 10**6), CallResult(True, 0)]
        chains = ChainRegistry(
            {1: sample_app_config.chains[1]}, MagicMock(return_value=client)
        )
        catalog = TokenCatalog({1: (TokenInfo(USDC, "USDC", 6), TokenInfo(WETH, "WETH", 18))})

        oracle = AsyncMock()
        oracle.get_price.side_effect = lambda client, symbol, chain_id: (
            2500.0 if symbol == "ETH" else None
        )
        market = AsyncMock()
        market.get_price_by_id.return_value = None
        market.get_price_by_contract.return_value = None
        prices = PriceService(
            PricingConfig(), oracle, None, market, catalog, clock=clock
        )

        quiet = FakeAdapter("aave-v3", {1}, probe=False)
        aggregator = PortfolioAggregator(
            chains,
            ProtocolRegistry([quiet]),
            WalletBalanceFetcher(chains, catalog, prices, clock=clock),
            prices,
            clock=clock,
        )

        portfolio = await aggregator.get_portfolio(EVM_WALLET)

        assert portfolio.total_value_usd == pytest.approx(12_500)
        assert len(portfolio.wallet.balances) == 2
        assert portfolio.positions == ()
        assert quiet.reads == 0

    @pytest.mark.asyncio
    async def test_staked_token_counted_once(
        self, sample_app_config: AppConfig, scripted_client, clock
    ) -> None:
        """1 wstETH held in the wallet is reported as a Lido stake, not a wallet balance."""
        client = scripted_client(
            {
                "balanceOf": lambda token, account: 10**18 if token == WSTETH else 0,
                "getStETHByWstETH": lambda token, amount: 1_150_000_000_000_000_000,
            }
        )
        client.get_balance.return_value = 0
        chains = ChainRegistry(
            {1: sample_app_config.chains[1]}, MagicMock(return_value=client)
        )
        catalog = TokenCatalog(
            {1: (TokenInfo(USDC, "USDC", 6), TokenInfo(WSTETH, "wstETH", 18, category="lsd"))}
        )

        oracle = AsyncMock()
        oracle.get_price.side_effect = lambda client, symbol, chain_id: (
            2000.0 if symbol == "ETH" else None
        )
        market = AsyncMock()
        market.get_price_by_id.return_value = None
        market.get_price_by_contract.return_value = None
        prices = PriceService(
            PricingConfig(), oracle, None, market, catalog, clock=clock
        )

        aggregator = PortfolioAggregator(
            chains,
            ProtocolRegistry([LidoAdapter(catalog)]),
            WalletBalanceFetcher(chains, catalog, prices, clock=clock),
            prices,
            clock=clock,
        )

        portfolio = await aggregator.get_portfolio(EVM_WALLET)

        assert [p.id for p in portfolio.positions] == ["lido-wsteth-1"]
        assert portfolio.positions_value_usd == pytest.approx(2_300)
        assert portfolio.wallet.balances == ()
        assert portfolio.total_value_usd == pytest.approx(2_300)


class TestAggregation:
    @pytest.mark.asyncio
    async def test_groupings(self, chains: ChainRegistry, clock) -> None:
        lender = FakeAdapter(
            "aave-v3",
            {1, 8453},
            read=[
                _position("aave-v3", 1),
                _position("aave-v3", 1, "borrow", 400 * 10**6),
                _position("aave-v3", 8453),
            ],
        )
        other = FakeAdapter("compound-v3", {1}, read=[_position("compound-v3", 1)])
        aggregator = _aggregator(chains, [lender, other], clock)

        portfolio = await aggregator.get_portfolio(EVM_WALLET, "1,8453")

        assert portfolio.address == EVM_WALLET
        assert len(portfolio.positions) == 4
        assert set(portfolio.by_chain) == {1, 8453}
        assert portfolio.by_chain[1].chain_name == "Ethereum"
        assert portfolio.by_chain[1].total_value_usd == pytest.approx(1_600)
        assert portfolio.by_protocol["aave-v3"].total_value_usd == pytest.approx(1_600)
        assert portfolio.by_protocol["compound-v3"].protocol_name == "Compound-V3"
        assert len(portfolio.by_type["supply"]) == 3
        assert len(portfolio.by_type["borrow"]) == 1
        assert portfolio.total_value_usd == pytest.approx(2_600)
        assert portfolio.fetched_at == int(clock() * 1000)

    @pytest.mark.asyncio
    async def test_defaults_to_chains_of_address_family(self, chains: ChainRegistry, clock) -> None:
        balances = _empty_wallet()
        aggregator = _aggregator(chains, [], clock, balances=balances)

        evm = await aggregator.get_portfolio(EVM_WALLET)
        sol = await aggregator.get_portfolio(SOLANA_WALLET)

        assert set(evm.by_chain) == {1, 8453}
        assert set(sol.by_chain) == {"solana"}

    @pytest.mark.asyncio
    async def test_requested_chain_without_positions_is_listed(
        self, chains: ChainRegistry, clock
    ) -> None:
        aggregator = _aggregator(chains, [FakeAdapter("aave-v3", {1}, probe=False)], clock)
        portfolio = await aggregator.get_portfolio(EVM_WALLET, [1])
        assert portfolio.by_chain[1].positions == ()
        assert portfolio.total_value_usd == 0


class TestTwoPhaseDiscovery:
    @pytest.mark.asyncio
    async def test_only_probed_adapters_are_read(self, chains: ChainRegistry, clock) -> None:
        active = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        idle = FakeAdapter("compound-v3", {1}, probe=False, read=[_position("compound-v3", 1)])
        aggregator = _aggregator(chains, [active, idle], clock)

        portfolio = await aggregator.get_portfolio(EVM_WALLET, [1])

        assert [p.protocol.id for p in portfolio.positions] == ["aave-v3"]
        assert (active.reads, idle.reads) == (1, 0)

    @pytest.mark.asyncio
    async def test_probe_exception_skips_adapter(self, chains: ChainRegistry, clock) -> None:
        broken = FakeAdapter("compound-v3", {1}, probe=RuntimeError("boom"))
        healthy = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        portfolio = await _aggregator(chains, [broken, healthy], clock).get_portfolio(
            EVM_WALLET, [1]
        )
        assert [p.protocol.id for p in portfolio.positions] == ["aave-v3"]
        assert broken.reads == 0


class TestBranchIsolation:
    @pytest.mark.asyncio
    async def test_failed_branch_dropped(self, chains: ChainRegistry, clock) -> None:
        failing = FakeAdapter("compound-v3", {1}, read=ConnectionError("rpc down"))
        healthy = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        portfolio = await _aggregator(chains, [failing, healthy], clock).get_portfolio(
            EVM_WALLET, [1]
        )
        assert [p.protocol.id for p in portfolio.positions] == ["aave-v3"]

    @pytest.mark.asyncio
    async def test_partial_branch_kept(self, chains: ChainRegistry, clock) -> None:
        partial = FakeAdapter(
            "aave-v3", {1}, read=[_position("aave-v3", 1)], errors=("reserve read failed",)
        )
        portfolio = await _aggregator(chains, [partial], clock).get_portfolio(EVM_WALLET, [1])
        assert len(portfolio.positions) == 1

    @pytest.mark.asyncio
    async def test_every_branch_failing_gives_empty_portfolio(
        self, chains: ChainRegistry, clock
    ) -> None:
        adapters = [
            FakeAdapter("aave-v3", {1, 8453}, read=ConnectionError("down")),
            FakeAdapter("compound-v3", {1, 8453}, read=TimeoutError("slow")),
        ]
        portfolio = await _aggregator(chains, adapters, clock).get_portfolio(EVM_WALLET)
        assert portfolio.positions == ()
        assert portfolio.total_value_usd == 0
        assert set(portfolio.by_chain) == {1, 8453}


class TestValidation:
    @pytest.mark.asyncio
    async def test_malformed_address(self, chains: ChainRegistry, clock) -> None:
        balances = _empty_wallet()
        aggregator = _aggregator(chains, [], clock, balances=balances)
        with pytest.raises(ValidationError):
            await aggregator.get_portfolio("0x1234")
        balances.get_balances.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, chains: ChainRegistry, clock) -> None:
        with pytest.raises(ValidationError, match="Unsupported chain"):
            await _aggregator(chains, [], clock).get_portfolio(EVM_WALLET, [137])

    @pytest.mark.asyncio
    async def test_address_family_mismatch(self, chains: ChainRegistry, clock) -> None:
        with pytest.raises(ValidationError, match="not valid on chain"):
            await _aggregator(chains, [], clock).get_portfolio(SOLANA_WALLET, [1])

    @pytest.mark.asyncio
    async def test_lowercase_address_is_checksummed(self, chains: ChainRegistry, clock) -> None:
        portfolio = await _aggregator(chains, [], clock).get_portfolio(EVM_WALLET.lower(), [1])
        assert portfolio.address == EVM_WALLET


class TestResultCache:
    @pytest.mark.asyncio
    async def test_repeat_request_served_from_cache(self, chains: ChainRegistry, clock) -> None:
        adapter = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        aggregator = _aggregator(chains, [adapter], clock)

        first = await aggregator.get_portfolio(EVM_WALLET, [1])
        second = await aggregator.get_portfolio(EVM_WALLET.lower(), "1")

        assert second is first
        assert adapter.reads == 1

    @pytest.mark.asyncio
    async def test_cache_expires(self, chains: ChainRegistry, clock) -> None:
        adapter = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        aggregator = _aggregator(chains, [adapter], clock)

        await aggregator.get_portfolio(EVM_WALLET, [1])
        clock.advance(61)
        await aggregator.get_portfolio(EVM_WALLET, [1])

        assert adapter.reads == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, chains: ChainRegistry, clock) -> None:
        adapter = FakeAdapter("aave-v3", {1}, read=[_position("aave-v3", 1)])
        aggregator = _aggregator(chains, [adapter], clock)

        await aggregator.get_portfolio(EVM_WALLET, [1])
        await aggregator.clear_cache()
        await aggregator.get_portfolio(EVM_WALLET, [1])

        assert adapter.reads == 2


class TestTimeout:
    @pytest.mark.asyncio
    async def test_slow_request_raises(self, chains: ChainRegistry, clock) -> None:
        balances = AsyncMock()

        async def hang(address, chain_ids):
            await asyncio.sleep(10)

        balances.get_balances.side_effect = hang
        aggregator = _aggregator(
            chains,
            [],
            clock,
            balances=balances,
            config=PortfolioConfig(request_timeout_seconds=0.05),
        )

        with pytest.raises(RequestTimeoutError):
            await aggregator.get_portfolio(EVM_WALLET, [1])
