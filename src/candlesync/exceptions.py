"""Custom exceptions for the candle sync service.

Provider and storage failures live here so the exchange, data and sync
layers can share them without importing each other.
"""


class CandleSyncError(Exception):
    """Base exception for all candle sync errors."""


class ProviderUnavailable(CandleSyncError):
    """Raised when the market data provider cannot be reached or errors out."""


class StorageUnavailable(CandleSyncError):
    """Raised when the candle store cannot be read or written."""


class DuplicateKey(CandleSyncError):
    """Raised when a candle with the same open time is already stored.

    Expected at batch boundaries; the sync engine treats it as a no-op.
    """

    def __init__(self, open_time: int) -> None:
        super().__init__(f"Candle with open time {open_time} already stored")
        self.open_time = open_time


class UnknownSymbol(CandleSyncError):
    """Raised when the configured symbol is not listed by the provider."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Symbol {symbol} not found in loaded markets")
        self.symbol = symbol
