"""Abstract market data client interface.

Defines the contract the sync engine and lookups depend on, keeping
exchange-specific details isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod

from candlesync.models import InvalidDirection, PriceLevel


class MarketDataClient(ABC):
    """Abstract base class for read-only market data providers."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection and load markets."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_symbols(self) -> list[str]:
        """Return exchange-native ids of all listed spot symbols."""
        ...

    @abstractmethod
    async def fetch_best_price(
        self, symbol: str, direction: str = "ask"
    ) -> PriceLevel | InvalidDirection | None:
        """Return the best ask or bid level for a symbol.

        Returns InvalidDirection (without touching the network) when
        ``direction`` is not "ask" or "bid", and None when the requested
        side of the book is empty.
        """
        ...

    @abstractmethod
    async def fetch_order_book(self, symbol: str) -> dict:
        """Fetch the full order book snapshot for a symbol."""
        ...

    @abstractmethod
    async def fetch_latest_candle_open_time(
        self, symbol: str, timeframe: str
    ) -> int | None:
        """Return the open time (ms) of the most recent candle, or None if none."""
        ...

    @abstractmethod
    async def fetch_candles(self, symbol: str, timeframe: str, limit: int) -> list[list]:
        """Fetch the ``limit`` most recent raw candles.

        Returns list of [timestamp_ms, open, high, low, close, volume] rows,
        oldest first.
        """
        ...
