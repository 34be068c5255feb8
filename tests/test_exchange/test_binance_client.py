"""Tests for BinanceClient.

All tests use mocked ccxt exchange methods to avoid real API calls.
"""

from unittest.mock import AsyncMock

import ccxt.async_support as ccxt_async
import pytest

from candlesync.config import ProviderSettings
from candlesync.exceptions import ProviderUnavailable, UnknownSymbol
from candlesync.exchange.binance_client import BinanceClient
from candlesync.models import InvalidDirection, PriceLevel


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

MOCK_MARKETS = {
    "BTC/USDT": {
        "id": "BTCUSDT",
        "symbol": "BTC/USDT",
        "base": "BTC",
        "quote": "USDT",
        "type": "spot",
        "spot": True,
        "swap": False,
    },
    "ETH/USDT": {
        "id": "ETHUSDT",
        "symbol": "ETH/USDT",
        "base": "ETH",
        "quote": "USDT",
        "type": "spot",
        "spot": True,
        "swap": False,
    },
    "BTC/USDT:USDT": {
        "id": "BTCUSDT",
        "symbol": "BTC/USDT:USDT",
        "base": "BTC",
        "quote": "USDT",
        "settle": "USDT",
        "type": "swap",
        "spot": False,
        "swap": True,
    },
}

MOCK_ORDER_BOOK = {
    "symbol": "BTC/USDT",
    "asks": [[50010.5, 0.25], [50011.0, 1.0]],
    "bids": [[50009.5, 0.5], [50009.0, 2.0]],
    "timestamp": None,
    "nonce": 123456,
}


@pytest.fixture
def provider_settings() -> ProviderSettings:
    """Testnet provider settings."""
    return ProviderSettings(exchange_id="binance", testnet=True)


@pytest.fixture
def client(provider_settings: ProviderSettings) -> BinanceClient:
    """BinanceClient with mocked market loading."""
    client = BinanceClient(provider_settings)
    client._exchange.load_markets = AsyncMock(return_value=MOCK_MARKETS)
    return client


# ---------------------------------------------------------------------------
# Init / lifecycle
# ---------------------------------------------------------------------------


class TestBinanceClientInit:
    """Tests for BinanceClient initialization."""

    def test_testnet_uses_sandbox_urls(self, provider_settings: ProviderSettings) -> None:
        client = BinanceClient(provider_settings)
        assert "testnet.binance.vision" in str(client.exchange.urls["api"])

    def test_rate_limit_enabled(self, provider_settings: ProviderSettings) -> None:
        client = BinanceClient(provider_settings)
        assert client.exchange.enableRateLimit is True

    @pytest.mark.asyncio
    async def test_connect_loads_markets(self, client: BinanceClient) -> None:
        await client.connect()
        client._exchange.load_markets.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_failure_is_provider_unavailable(
        self, client: BinanceClient
    ) -> None:
        client._exchange.load_markets = AsyncMock(
            side_effect=ccxt_async.NetworkError("dns failure")
        )
        with pytest.raises(ProviderUnavailable, match="dns failure"):
            await client.connect()

    @pytest.mark.asyncio
    async def test_close_calls_exchange_close(self, client: BinanceClient) -> None:
        client._exchange.close = AsyncMock()
        await client.close()
        client._exchange.close.assert_awaited_once()


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------


class TestSymbols:
    """Exchange-native ids resolve to spot unified symbols."""

    @pytest.mark.asyncio
    async def test_resolve_exchange_id(self, client: BinanceClient) -> None:
        assert await client.resolve_symbol("BTCUSDT") == "BTC/USDT"

    @pytest.mark.asyncio
    async def test_resolve_unified_passthrough(self, client: BinanceClient) -> None:
        assert await client.resolve_symbol("ETH/USDT") == "ETH/USDT"

    @pytest.mark.asyncio
    async def test_resolve_unknown_raises(self, client: BinanceClient) -> None:
        with pytest.raises(UnknownSymbol, match="FAKEUSDT not found"):
            await client.resolve_symbol("FAKEUSDT")

    @pytest.mark.asyncio
    async def test_fetch_symbols_spot_only(self, client: BinanceClient) -> None:
        symbols = await client.fetch_symbols()
        assert sorted(symbols) == ["BTCUSDT", "ETHUSDT"]


# ---------------------------------------------------------------------------
# Order book lookups
# ---------------------------------------------------------------------------


class TestBestPrice:
    """Best ask/bid lookups."""

    @pytest.mark.asyncio
    async def test_best_ask(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(return_value=MOCK_ORDER_BOOK)
        level = await client.fetch_best_price("BTCUSDT", "ask")
        assert level == PriceLevel(price=50010.5, amount=0.25)
        client._exchange.fetch_order_book.assert_awaited_once_with("BTC/USDT", limit=1)

    @pytest.mark.asyncio
    async def test_best_bid(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(return_value=MOCK_ORDER_BOOK)
        level = await client.fetch_best_price("BTCUSDT", "bid")
        assert level == PriceLevel(price=50009.5, amount=0.5)

    @pytest.mark.asyncio
    async def test_default_direction_is_ask(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(return_value=MOCK_ORDER_BOOK)
        level = await client.fetch_best_price("BTCUSDT")
        assert isinstance(level, PriceLevel)
        assert level.price == 50010.5

    @pytest.mark.asyncio
    async def test_invalid_direction_before_network(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(return_value=MOCK_ORDER_BOOK)
        result = await client.fetch_best_price("BTCUSDT", "mid")
        assert result == InvalidDirection("mid")
        client._exchange.fetch_order_book.assert_not_awaited()
        client._exchange.load_markets.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_side_returns_none(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(
            return_value={"asks": [], "bids": [[1.0, 1.0]]}
        )
        assert await client.fetch_best_price("BTCUSDT", "ask") is None

    @pytest.mark.asyncio
    async def test_network_error_is_provider_unavailable(
        self, client: BinanceClient
    ) -> None:
        client._exchange.fetch_order_book = AsyncMock(
            side_effect=ccxt_async.RequestTimeout("slow")
        )
        with pytest.raises(ProviderUnavailable):
            await client.fetch_best_price("BTCUSDT", "bid")

    @pytest.mark.asyncio
    async def test_full_order_book_passthrough(self, client: BinanceClient) -> None:
        client._exchange.fetch_order_book = AsyncMock(return_value=MOCK_ORDER_BOOK)
        book = await client.fetch_order_book("BTCUSDT")
        assert book is MOCK_ORDER_BOOK
        client._exchange.fetch_order_book.assert_awaited_once_with("BTC/USDT")


# ---------------------------------------------------------------------------
# Klines
# ---------------------------------------------------------------------------


class TestCandles:
    """Kline fetches used by the sync engine."""

    @pytest.mark.asyncio
    async def test_latest_open_time(self, client: BinanceClient) -> None:
        client._exchange.fetch_ohlcv = AsyncMock(
            return_value=[[1700000060000, 1.0, 2.0, 0.5, 1.5, 10.0]]
        )
        latest = await client.fetch_latest_candle_open_time("BTCUSDT", "1m")
        assert latest == 1700000060000
        assert isinstance(latest, int)
        client._exchange.fetch_ohlcv.assert_awaited_once_with("BTC/USDT", "1m", limit=1)

    @pytest.mark.asyncio
    async def test_latest_open_time_empty(self, client: BinanceClient) -> None:
        client._exchange.fetch_ohlcv = AsyncMock(return_value=[])
        assert await client.fetch_latest_candle_open_time("BTCUSDT", "1m") is None

    @pytest.mark.asyncio
    async def test_fetch_candles(self, client: BinanceClient) -> None:
        rows = [
            [1700000000000, 1.0, 2.0, 0.5, 1.5, 10.0],
            [1700000060000, 1.5, 2.5, 1.0, 2.0, 12.0],
        ]
        client._exchange.fetch_ohlcv = AsyncMock(return_value=rows)
        result = await client.fetch_candles("BTCUSDT", "1m", 10)
        assert result == rows
        client._exchange.fetch_ohlcv.assert_awaited_once_with("BTC/USDT", "1m", limit=10)

    @pytest.mark.asyncio
    async def test_exchange_error_is_provider_unavailable(
        self, client: BinanceClient
    ) -> None:
        client._exchange.fetch_ohlcv = AsyncMock(
            side_effect=ccxt_async.ExchangeNotAvailable("maintenance")
        )
        with pytest.raises(ProviderUnavailable, match="maintenance"):
            await client.fetch_candles("BTCUSDT", "1m", 10)
