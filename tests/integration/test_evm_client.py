"""Integration tests for the EVM client — Multicall3 encoding and decoding."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import AsyncHTTPProvider, AsyncWeb3

from defi_portfolio.chains.evm.client import CallResult, ContractCall, EvmClient
from defi_portfolio.chains.evm.erc20 import ERC20_ABI
from defi_portfolio.config import ChainConfig
from defi_portfolio.protocols.aave_v3.addresses import POOL_ABI

TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
POOL = "0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2"
WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"


@pytest.fixture()
def w3() -> AsyncWeb3:
    # Never connected; only the ABI codec is used.
    return AsyncWeb3(AsyncHTTPProvider("http://127.0.0.1:1"))


@pytest.fixture()
def client(eth_chain_config: ChainConfig, w3: AsyncWeb3) -> EvmClient:
    return EvmClient(eth_chain_config, w3=w3)


class TestMulticall:
    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self, client: EvmClient) -> None:
        client._aggregate3 = AsyncMock()  # type: ignore[method-assign]
        assert await client.multicall([]) == []
        client._aggregate3.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_decodes_single_and_tuple_outputs(self, client: EvmClient, w3: AsyncWeb3) -> None:
        account_data = (5 * 10**8, 2 * 10**8, 10**8, 8250, 8000, 2 * 10**18)
        client._aggregate3 = AsyncMock(  # type: ignore[method-assign]
            return_value=[
                (True, w3.codec.encode(["uint256"], [1_500_000])),
                (True, w3.codec.encode(["uint256"] * 6, list(account_data))),
            ]
        )

        results = await client.multicall(
            [
                ContractCall(TOKEN, ERC20_ABI, "balanceOf", (WALLET,)),
                ContractCall(POOL, POOL_ABI, "getUserAccountData", (WALLET,)),
            ]
        )

        assert results[0] == CallResult(True, 1_500_000)
        assert results[1].success
        assert results[1].value == account_data

    @pytest.mark.asyncio
    async def test_payload_uses_checksummed_targets(self, client: EvmClient, w3: AsyncWeb3) -> None:
        client._aggregate3 = AsyncMock(  # type: ignore[method-assign]
            return_value=[(True, w3.codec.encode(["uint8"], [6]))]
        )
        await client.multicall([ContractCall(TOKEN.lower(), ERC20_ABI, "decimals")])

        (payload,) = client._aggregate3.await_args.args
        target, allow_failure, call_data = payload[0]
        assert target == TOKEN
        assert allow_failure is True
        assert call_data[:4] == bytes.fromhex("313ce567")

    @pytest.mark.asyncio
    async def test_failed_and_undecodable_entries(self, client: EvmClient) -> None:
        client._aggregate3 = AsyncMock(  # type: ignore[method-assign]
            return_value=[(False, b""), (True, b"\x01")]
        )
        results = await client.multicall(
            [
                ContractCall(TOKEN, ERC20_ABI, "balanceOf", (WALLET,)),
                ContractCall(TOKEN, ERC20_ABI, "balanceOf", (WALLET,)),
            ]
        )
        assert results == [CallResult(False), CallResult(False)]

    @pytest.mark.asyncio
    async def test_aggregate_failure_propagates(self, client: EvmClient) -> None:
        client._aggregate3 = AsyncMock(side_effect=ConnectionError("down"))  # type: ignore[method-assign]
        with pytest.raises(ConnectionError):
            await client.multicall([ContractCall(TOKEN, ERC20_ABI, "decimals")])

    @pytest.mark.asyncio
    async def test_unknown_function_raises(self, client: EvmClient) -> None:
        with pytest.raises(ValueError):
            await client.multicall([ContractCall(TOKEN, ERC20_ABI, "nonexistent")])


class TestNativeReads:
    @pytest.mark.asyncio
    async def test_get_balance(self, eth_chain_config: ChainConfig) -> None:
        w3 = MagicMock()
        w3.eth.get_balance = AsyncMock(return_value=10**18)
        client = EvmClient(eth_chain_config, w3=w3)

        assert await client.get_balance(WALLET) == 10**18
        w3.eth.get_balance.assert_awaited_once_with("0x742d35Cc6634C0532925a3b844Bc454e4438f44e")

    def test_defaults_to_primary_rpc(self, eth_chain_config: ChainConfig) -> None:
        client = EvmClient(eth_chain_config)
        assert client.url == "https://rpc1.example.com"
        assert client.chain_id == 1
