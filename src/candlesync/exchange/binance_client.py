"""Binance market data client implementation via ccxt async.

Wraps ccxt.async_support.binance with sandbox (testnet) support, market
loading, exchange-id symbol resolution and async cleanup. Every ccxt error
surfaces as ProviderUnavailable so callers handle a single failure type.
"""

import ccxt.async_support as ccxt_async

from candlesync.config import ProviderSettings
from candlesync.exceptions import ProviderUnavailable, UnknownSymbol
from candlesync.exchange.client import MarketDataClient
from candlesync.logging import get_logger
from candlesync.models import InvalidDirection, PriceLevel, PriceSide

logger = get_logger(__name__)


class BinanceClient(MarketDataClient):
    """Concrete Binance spot market data client using ccxt async."""

    def __init__(self, settings: ProviderSettings) -> None:
        self._settings = settings

        exchange_class = getattr(ccxt_async, settings.exchange_id)
        self._exchange = exchange_class(
            {
                "enableRateLimit": True,
                "options": {
                    "defaultType": "spot",
                    "fetchMarkets": {"types": ["spot"]},
                },
            }
        )
        if settings.testnet:
            self._exchange.set_sandbox_mode(True)

        self._markets: dict = {}
        self._symbols_by_id: dict[str, str] = {}

    @property
    def exchange(self) -> ccxt_async.Exchange:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info(
            "connecting_to_provider",
            exchange=self._settings.exchange_id,
            testnet=self._settings.testnet,
        )
        await self.load_markets()
        logger.info(
            "provider_connected",
            exchange=self._settings.exchange_id,
            market_count=len(self._markets),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_provider_connection")
        await self._exchange.close()
        logger.info("provider_connection_closed")

    async def load_markets(self, reload: bool = False) -> dict:
        """Load and cache market data, indexing spot markets by exchange id."""
        try:
            self._markets = await self._exchange.load_markets(reload)
        except ccxt_async.BaseError as e:
            raise ProviderUnavailable(f"Failed to load markets: {e}") from e
        self._symbols_by_id = {
            market["id"]: symbol
            for symbol, market in self._markets.items()
            if market.get("spot")
        }
        return self._markets

    async def resolve_symbol(self, symbol: str) -> str:
        """Map an exchange-native id (BTCUSDT) to the ccxt unified symbol (BTC/USDT).

        Unified symbols are passed through unchanged. Raises UnknownSymbol when the
        symbol is not a listed spot market.
        """
        if not self._markets:
            await self.load_markets()

        if symbol in self._markets:
            return symbol
        unified = self._symbols_by_id.get(symbol)
        if unified is None:
            raise UnknownSymbol(symbol)
        return unified

    async def fetch_symbols(self) -> list[str]:
        """Return exchange-native ids of all listed spot symbols (exchangeInfo)."""
        await self.load_markets(reload=True)
        symbols = list(self._symbols_by_id)
        logger.debug("fetched_symbols", count=len(symbols))
        return symbols

    async def fetch_best_price(
        self, symbol: str, direction: str = "ask"
    ) -> PriceLevel | InvalidDirection | None:
        """Return the top-of-book level on the requested side."""
        try:
            side = PriceSide(direction)
        except ValueError:
            return InvalidDirection(direction)

        unified = await self.resolve_symbol(symbol)
        try:
            book = await self._exchange.fetch_order_book(unified, limit=1)
        except ccxt_async.BaseError as e:
            raise ProviderUnavailable(f"Failed to fetch depth for {symbol}: {e}") from e

        levels = book.get("asks" if side is PriceSide.ASK else "bids") or []
        if not levels:
            return None
        price, amount = levels[0][0], levels[0][1]
        return PriceLevel(price=float(price), amount=float(amount))

    async def fetch_order_book(self, symbol: str) -> dict:
        """Fetch the full depth snapshot, passed through as returned by ccxt."""
        unified = await self.resolve_symbol(symbol)
        try:
            return await self._exchange.fetch_order_book(unified)
        except ccxt_async.BaseError as e:
            raise ProviderUnavailable(f"Failed to fetch order book for {symbol}: {e}") from e

    async def fetch_latest_candle_open_time(
        self, symbol: str, timeframe: str
    ) -> int | None:
        """Return the open time of the newest candle (klines with limit=1)."""
        rows = await self.fetch_candles(symbol, timeframe, limit=1)
        if not rows:
            return None
        return int(rows[0][0])

    async def fetch_candles(self, symbol: str, timeframe: str, limit: int) -> list[list]:
        """Fetch the most recent ``limit`` klines, oldest first."""
        unified = await self.resolve_symbol(symbol)
        try:
            rows = await self._exchange.fetch_ohlcv(unified, timeframe, limit=limit)
        except ccxt_async.BaseError as e:
            raise ProviderUnavailable(
                f"Failed to fetch {timeframe} klines for {symbol}: {e}"
            ) from e
        logger.debug(
            "fetched_candles",
            symbol=symbol,
            timeframe=timeframe,
            requested=limit,
            received=len(rows),
        )
        return rows
