"""Incremental candle sync -- staleness check, bounded fetch, dedup-safe persist."""

from candlesync.sync.engine import SyncEngine, is_stale, normalize_candles
from candlesync.sync.models import CycleResult, CycleState
from candlesync.sync.scheduler import PollScheduler

__all__ = [
    "CycleResult",
    "CycleState",
    "PollScheduler",
    "SyncEngine",
    "is_stale",
    "normalize_candles",
]
