"""Unit tests for the rate-limited CoinGecko client."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from defi_portfolio.config import CoinGeckoConfig
from defi_portfolio.pricing.coingecko import CoinGeckoClient


def _mock_session(status: int = 200, data: dict | None = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


@pytest.fixture()
def limiter() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def client(limiter: AsyncMock) -> CoinGeckoClient:
    return CoinGeckoClient(
        CoinGeckoConfig(base_url="https://cg.example.com/api/v3/", api_key="demo"), limiter
    )


class TestGetPriceById:
    @pytest.mark.asyncio
    async def test_returns_usd_price(self, client: CoinGeckoClient, limiter: AsyncMock) -> None:
        mock_session = _mock_session(data={"ethereum": {"usd": 2500.5}})

        with patch("defi_portfolio.pricing.coingecko.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.pricing.coingecko.aiohttp.TCPConnector"):
                price = await client.get_price_by_id("ethereum")

        assert price == 2500.5
        limiter.acquire.assert_awaited_once()
        args, kwargs = mock_session.get.call_args
        assert args[0] == "https://cg.example.com/api/v3/simple/price"
        assert kwargs["params"] == {"ids": "ethereum", "vs_currencies": "usd"}
        assert kwargs["headers"]["x-cg-demo-api-key"] == "demo"

    @pytest.mark.asyncio
    async def test_rate_limited_returns_none(self, client: CoinGeckoClient) -> None:
        mock_session = _mock_session(status=429)

        with patch("defi_portfolio.pricing.coingecko.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.pricing.coingecko.aiohttp.TCPConnector"):
                assert await client.get_price_by_id("ethereum") is None

    @pytest.mark.asyncio
    async def test_missing_id_returns_none(self, client: CoinGeckoClient) -> None:
        mock_session = _mock_session(data={})

        with patch("defi_portfolio.pricing.coingecko.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.pricing.coingecko.aiohttp.TCPConnector"):
                assert await client.get_price_by_id("nothing") is None

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self, client: CoinGeckoClient) -> None:
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=ConnectionError("down"))
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        with patch("defi_portfolio.pricing.coingecko.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.pricing.coingecko.aiohttp.TCPConnector"):
                assert await client.get_price_by_id("ethereum") is None


class TestGetPriceByContract:
    @pytest.mark.asyncio
    async def test_lowercased_response_key(self, client: CoinGeckoClient) -> None:
        address = "0xAbCdEf0000000000000000000000000000000001"
        mock_session = _mock_session(data={address.lower(): {"usd": 0.42}})

        with patch("defi_portfolio.pricing.coingecko.aiohttp.ClientSession", return_value=mock_session):
            with patch("defi_portfolio.pricing.coingecko.aiohttp.TCPConnector"):
                price = await client.get_price_by_contract(8453, address)

        assert price == 0.42
        assert mock_session.get.call_args[0][0].endswith("/simple/token_price/base")

    @pytest.mark.asyncio
    async def test_unknown_platform_skips_request(
        self, client: CoinGeckoClient, limiter: AsyncMock
    ) -> None:
        assert await client.get_price_by_contract(999999, "0xabc") is None
        limiter.acquire.assert_not_awaited()
