"""Shared data models for the candle sync service.

Candle prices and volume are floats to match the REAL columns of the store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar for the tracked symbol/timeframe.

    ``open_time`` (Unix milliseconds) is the candle's identity and the
    dedup key in the store; the surrogate row id is never exposed.
    """

    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def from_raw(cls, raw: Sequence) -> "Candle":
        """Normalize a raw kline row ``[openTime, open, high, low, close, volume, ...]``.

        Only the first six fields are read. Binance sends prices as strings,
        ccxt sends floats; both are accepted. Raises ValueError on short rows
        or values that are not numeric.
        """
        if len(raw) < 6:
            raise ValueError(f"Raw candle needs at least 6 fields, got {len(raw)}")
        try:
            return cls(
                open_time=int(raw[0]),
                open=float(raw[1]),
                high=float(raw[2]),
                low=float(raw[3]),
                close=float(raw[4]),
                volume=float(raw[5]),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Malformed raw candle {list(raw[:6])!r}: {e}") from e


class PriceSide(str, Enum):
    """Order book side whose best price is requested."""

    ASK = "ask"
    BID = "bid"


@dataclass(frozen=True)
class PriceLevel:
    """A single order book level."""

    price: float
    amount: float


@dataclass(frozen=True)
class InvalidDirection:
    """Returned instead of a price when the requested side is not ask/bid."""

    direction: str

    @property
    def message(self) -> str:
        return f"Direction {self.direction!r} not recognized, expected 'ask' or 'bid'"
