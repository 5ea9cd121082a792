"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from defi_portfolio.chains.evm.client import CallResult, ContractCall
from defi_portfolio.config import (
    AppConfig,
    ChainConfig,
    PortfolioConfig,
    PricingConfig,
    PythConfig,
    YieldAnalysisConfig,
)
from defi_portfolio.models import Position, ProtocolInfo, TokenBalance, YieldInfo

EVM_WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
SOLANA_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"

USDC_MAINNET = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
WETH_MAINNET = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def eth_chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id=1,
        name="Ethereum",
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def base_chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id=8453,
        name="Base",
        rpc_endpoints=("https://base1.example.com",),
        rpc_timeout=10,
    )


@pytest.fixture()
def solana_chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id="solana",
        name="Solana",
        family="solana",
        native_symbol="SOL",
        native_decimals=9,
        rpc_endpoints=("https://sol1.example.com", "https://sol2.example.com"),
        rpc_timeout=5,
    )


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"SOL": "0xaaa111", "BTC": "bbb222", "USDC": "ccc333"},
    )


@pytest.fixture()
def sample_app_config(
    eth_chain_config: ChainConfig,
    base_chain_config: ChainConfig,
    solana_chain_config: ChainConfig,
    sample_pyth_config: PythConfig,
) -> AppConfig:
    return AppConfig(
        chains={
            1: eth_chain_config,
            8453: base_chain_config,
            "solana": solana_chain_config,
        },
        pricing=PricingConfig(pyth=sample_pyth_config),
        portfolio=PortfolioConfig(request_timeout_seconds=5, result_cache_ttl_seconds=60),
        yield_analysis=YieldAnalysisConfig(),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def aave_info() -> ProtocolInfo:
    return ProtocolInfo(id="aave-v3", name="Aave V3", category="lending")


@pytest.fixture()
def usdc_balance() -> TokenBalance:
    # 10,000 USDC at $1
    return TokenBalance(USDC_MAINNET, "USDC", 6, 10_000 * 10**6, 1.0)


@pytest.fixture()
def usdc_supply_position(aave_info: ProtocolInfo, usdc_balance: TokenBalance) -> Position:
    return Position(
        id=f"aave-v3-supply-1-{USDC_MAINNET}",
        protocol=aave_info,
        chain_id=1,
        type="supply",
        tokens=(usdc_balance,),
        yield_info=YieldInfo(apy=0.03, apr=0.03),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    chains:
      ethereum:
        chain_id: 1
        name: Ethereum
        rpc_endpoints: ["${TEST_ETH_RPC}", "https://rpc.example.com"]
        rpc_timeout: 10
      solana:
        chain_id: solana
        name: Solana
        family: solana
        native_symbol: SOL
        native_decimals: 9
        rpc_endpoints: ["https://sol.example.com"]
    pricing:
      cache_ttl_seconds: 120
      stablecoin_pegs: {eurc: 1.1}
      derivative_premiums:
        wsteth: {base: eth, premium: 1.2}
      coingecko:
        api_key: "${TEST_CG_KEY}"
        rate_limit: {capacity: 5, refill_per_second: 1}
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {sol: "aaa"}
    portfolio:
      request_timeout_seconds: 30
      result_cache_ttl_seconds: 90
    yield_analysis:
      min_value_usd: 25
      risk_tiers:
        low: [Aave-V3]
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Scripted chain client
# ---------------------------------------------------------------------------


def _scripted_client(responses: dict[str, Any]) -> AsyncMock:
    """Chain client whose contract reads are answered from ``responses``.

    Keys are function names; values are a return value, a callable taking
    ``(address, *args)``, or an exception to raise. Inside a multicall a
    ``CallResult`` value is passed through as-is (use ``CallResult(False)``
    for a reverted entry) and a raised exception becomes a failed entry.
    ``responses["multicall"]`` set to an exception fails the whole batch.
    """
    client = AsyncMock()

    def resolve(fn_name: str, address: str, args: tuple) -> Any:
        if fn_name not in responses:
            raise AssertionError(f"unexpected read: {fn_name}")
        result = responses[fn_name]
        if callable(result) and not isinstance(result, CallResult):
            result = result(address, *args)
        if isinstance(result, Exception):
            raise result
        return result

    async def call(address: str, abi: Any, fn_name: str, *args: Any) -> Any:
        return resolve(fn_name, address, args)

    async def multicall(calls: list[ContractCall]) -> list[CallResult]:
        batch_error = responses.get("multicall")
        if isinstance(batch_error, Exception):
            raise batch_error
        results = []
        for c in calls:
            try:
                value = resolve(c.fn_name, c.address, c.args)
            except AssertionError:
                raise
            except Exception:
                results.append(CallResult(False))
                continue
            results.append(value if isinstance(value, CallResult) else CallResult(True, value))
        return results

    client.call.side_effect = call
    client.multicall.side_effect = multicall
    return client


@pytest.fixture()
def scripted_client() -> Callable[[dict[str, Any]], AsyncMock]:
    return _scripted_client
