"""Candle persistence layer.

Provides SQLite connection management and the dedup-safe candle repository.
"""

from candlesync.data.database import CandleDatabase
from candlesync.data.repository import CandleRepository

__all__ = ["CandleDatabase", "CandleRepository"]
