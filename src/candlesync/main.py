"""Entry point for the candle sync service.

Wires components together and runs the poll scheduler:
1. AppSettings (configuration)
2. Logging setup
3. BinanceClient (market data provider)
4. CandleDatabase + CandleRepository (schema created on startup)
5. SyncEngine + PollScheduler

Schema initialization failure is fatal; any failure after that is handled
per cycle. SIGINT/SIGTERM stop the scheduler after the in-flight cycle.
"""

import asyncio
import signal

from candlesync.config import AppSettings
from candlesync.data.database import CandleDatabase
from candlesync.data.repository import CandleRepository
from candlesync.exceptions import CandleSyncError, ProviderUnavailable, UnknownSymbol
from candlesync.exchange.binance_client import BinanceClient
from candlesync.logging import get_logger, setup_logging
from candlesync.sync.engine import SyncEngine
from candlesync.sync.models import CycleState
from candlesync.sync.scheduler import PollScheduler


def _setup_signal_handlers(scheduler: PollScheduler) -> None:
    """Register SIGINT/SIGTERM to stop the scheduler gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("candlesync.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(scheduler.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def run(settings: AppSettings | None = None) -> int:
    """Run the candle sync service until stopped. Returns a process exit code."""
    settings = settings or AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("candlesync.main")

    provider = BinanceClient(settings.provider)
    try:
        # Provider outages are retried per cycle; an unknown symbol never recovers
        try:
            await provider.connect()
            await provider.resolve_symbol(settings.sync.symbol)
        except ProviderUnavailable as e:
            logger.warning("provider_unavailable_at_startup", error=str(e))
        except UnknownSymbol as e:
            logger.critical("unknown_symbol", symbol=settings.sync.symbol, error=str(e))
            return 1

        async with CandleDatabase(settings.store.db_path) as database:
            repository = CandleRepository(database, settings.store.table_name)
            try:
                await repository.initialize_schema()
            except CandleSyncError as e:
                logger.critical("schema_initialization_failed", error=str(e))
                return 1

            logger.info(
                "candle_store_ready",
                db_path=settings.store.db_path,
                table=repository.table_name,
                stored=await repository.count(),
                latest_open_time=await repository.get_max_open_time(),
            )

            engine = SyncEngine(provider, repository, settings.sync)
            scheduler = PollScheduler(engine, settings.sync.poll_interval)

            if settings.sync.run_once:
                result = await scheduler.run_once()
                logger.info("single_cycle_finished", state=result.state.value)
                return 2 if result.state is CycleState.FAILED else 0

            _setup_signal_handlers(scheduler)
            logger.info(
                "candle_sync_starting",
                symbol=settings.sync.symbol,
                timeframe=settings.sync.timeframe,
                batch_size=settings.sync.batch_size,
                poll_interval_ms=settings.sync.poll_interval_ms,
            )
            await scheduler.start()
    except CandleSyncError as e:
        logger.critical("candle_store_unavailable", error=str(e))
        return 1
    finally:
        await provider.close()
        logger.info("candle_sync_stopped")
    return 0


def main() -> None:
    """Synchronous entry point."""
    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
