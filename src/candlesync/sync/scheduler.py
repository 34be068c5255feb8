"""Fixed-interval scheduler that drives the sync engine.

Ticks fire on a fixed cadence measured from the first tick. A cycle always
runs to completion under a lock before the next one may start; ticks that
fall due while a slow cycle is still running are skipped, not queued.
stop() stops accepting ticks and waits for the in-flight cycle.
"""

import asyncio
import math

from candlesync.logging import get_logger
from candlesync.sync.engine import SyncEngine
from candlesync.sync.models import CycleResult

logger = get_logger(__name__)


class PollScheduler:
    """Runs SyncEngine.run_cycle() every ``interval`` seconds until stopped."""

    def __init__(self, engine: SyncEngine, interval: float = 5.0) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._engine = engine
        self._interval = interval
        self._running = False
        self._stop_event = asyncio.Event()
        self._cycle_lock = asyncio.Lock()
        self._cycle_count = 0
        self._last_result: CycleResult | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def last_result(self) -> CycleResult | None:
        return self._last_result

    async def start(self) -> None:
        """Tick until stop() is called."""
        if self._running:
            logger.warning("poll_scheduler_already_running")
            return
        self._running = True
        self._stop_event.clear()
        logger.info("poll_scheduler_started", interval_seconds=self._interval)

        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while self._running:
                await self._tick()

                next_tick += self._interval
                now = loop.time()
                if next_tick < now:
                    missed = math.ceil((now - next_tick) / self._interval)
                    next_tick += missed * self._interval
                    logger.warning("poll_ticks_skipped", missed=missed)

                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(), timeout=max(0.0, next_tick - now)
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("poll_scheduler_stopped", cycles=self._cycle_count)

    async def stop(self) -> None:
        """Stop accepting ticks and wait for the in-flight cycle to finish."""
        logger.info("poll_scheduler_stopping")
        self._running = False
        self._stop_event.set()
        async with self._cycle_lock:
            pass

    async def run_once(self) -> CycleResult:
        """Run a single cycle under the cycle lock."""
        async with self._cycle_lock:
            result = await self._engine.run_cycle()
        self._cycle_count += 1
        self._last_result = result
        return result

    async def _tick(self) -> None:
        try:
            await self.run_once()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.error("poll_cycle_crashed", exc_info=True)
