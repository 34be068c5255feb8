"""Market data client layer -- Binance API integration via ccxt."""

from candlesync.exchange.binance_client import BinanceClient
from candlesync.exchange.client import MarketDataClient

__all__ = ["BinanceClient", "MarketDataClient"]
