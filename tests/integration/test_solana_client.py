"""Integration tests for the Solana client — JSON-RPC calls and token account parsing."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from defi_portfolio.chains.solana.client import (
    TOKEN_PROGRAM_ID,
    SolanaClient,
    aggregate_token_accounts,
)
from defi_portfolio.config import ChainConfig

MSOL = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.fixture()
def client(solana_chain_config: ChainConfig) -> SolanaClient:
    return SolanaClient(solana_chain_config)


def _mock_session(response_data: dict | None = None, error: Exception | None = None):
    """Create a mock aiohttp session that returns given data or raises error."""
    mock_response = AsyncMock()
    mock_response.json = AsyncMock(return_value=response_data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    if error:
        mock_session.post = MagicMock(side_effect=error)
    else:
        mock_session.post = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)

    return mock_session


def _token_account(mint: str, amount: str, decimals: int, pubkey: str = "acc") -> dict:
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "tokenAmount": {"amount": amount, "decimals": decimals},
                    }
                }
            }
        },
    }


class TestRpcCall:
    @pytest.mark.asyncio
    async def test_successful_call(self, client: SolanaClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "result": {"data": "ok"}})

        with patch("defi_portfolio.chains.solana.client.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.chains.solana.client.aiohttp.TCPConnector"):
                result = await client.rpc_call("test_method", [])

        assert result == {"data": "ok"}
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://sol1.example.com"
        assert kwargs["json"]["method"] == "test_method"

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self, client: SolanaClient) -> None:
        mock_session = _mock_session(
            {"jsonrpc": "2.0", "error": {"code": -32000, "message": "bad"}}
        )

        with patch("defi_portfolio.chains.solana.client.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.chains.solana.client.aiohttp.TCPConnector"):
                with pytest.raises(RuntimeError, match="RPC Error"):
                    await client.rpc_call("test_method", [])

    @pytest.mark.asyncio
    async def test_connection_error_propagates(self, client: SolanaClient) -> None:
        mock_session = _mock_session(error=ConnectionError("down"))

        with patch("defi_portfolio.chains.solana.client.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.chains.solana.client.aiohttp.TCPConnector"):
                with pytest.raises(ConnectionError):
                    await client.rpc_call("test_method", [])

    def test_explicit_endpoint(self, solana_chain_config: ChainConfig) -> None:
        client = SolanaClient(solana_chain_config, "https://sol2.example.com")
        assert client.url == "https://sol2.example.com"


class TestReads:
    @pytest.mark.asyncio
    async def test_get_balance(self, client: SolanaClient) -> None:
        client.rpc_call = AsyncMock(return_value={"value": 2_500_000_000})  # type: ignore[method-assign]
        assert await client.get_balance("wallet") == 2_500_000_000
        client.rpc_call.assert_awaited_once_with("getBalance", ["wallet"])

    @pytest.mark.asyncio
    async def test_get_token_accounts_by_owner(self, client: SolanaClient) -> None:
        accounts = [_token_account(MSOL, "1000", 9)]
        client.rpc_call = AsyncMock(return_value={"value": accounts})  # type: ignore[method-assign]

        assert await client.get_token_accounts_by_owner("wallet") == accounts
        method, params = client.rpc_call.await_args.args
        assert method == "getTokenAccountsByOwner"
        assert params[1] == {"programId": TOKEN_PROGRAM_ID}
        assert params[2] == {"encoding": "jsonParsed"}

    @pytest.mark.asyncio
    async def test_block_height_uses_slot(self, client: SolanaClient) -> None:
        client.rpc_call = AsyncMock(return_value=250_000_000)  # type: ignore[method-assign]
        assert await client.get_block_height() == 250_000_000


class TestAggregateTokenAccounts:
    def test_sums_accounts_per_mint(self) -> None:
        accounts = [
            _token_account(MSOL, "1000", 9, "a"),
            _token_account(MSOL, "500", 9, "b"),
            _token_account(USDC, "42", 6, "c"),
        ]
        assert aggregate_token_accounts(accounts) == {MSOL: (1500, 9), USDC: (42, 6)}

    def test_skips_empty_and_malformed(self) -> None:
        accounts = [
            _token_account(MSOL, "0", 9),
            {"pubkey": "broken", "account": {"data": "base64"}},
            _token_account(USDC, "not-a-number", 6),
        ]
        assert aggregate_token_accounts(accounts) == {}
