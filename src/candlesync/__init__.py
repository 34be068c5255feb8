"""Incremental OHLCV candle sync from an exchange API into SQLite."""

__version__ = "0.1.0"
