"""Incremental candle sync engine.

One cycle compares the provider's newest candle open time with the newest
one stored and, when the provider is ahead, fetches a bounded batch of the
most recent candles and inserts each one. The sync cursor is never kept in
memory: it is re-read from the repository every cycle, so restarts resume
from whatever the table holds.

Failure policy:
- DuplicateKey: expected at batch boundaries, counted and skipped
- ProviderUnavailable / StorageUnavailable / malformed rows: the cycle ends
  as FAILED and is logged; the next tick is the retry
- run_cycle() never raises for these
"""

from candlesync.config import SyncSettings
from candlesync.data.repository import CandleRepository
from candlesync.exceptions import (
    DuplicateKey,
    ProviderUnavailable,
    StorageUnavailable,
    UnknownSymbol,
)
from candlesync.exchange.client import MarketDataClient
from candlesync.logging import get_logger
from candlesync.models import Candle
from candlesync.sync.models import CycleResult, CycleState

logger = get_logger(__name__)


def is_stale(remote_latest: int, local_max: int | None) -> bool:
    """Return True if the provider has a candle newer than anything stored.

    An empty series (local_max None) counts as negative infinity. Both
    sides are compared as ints so a stored value read back as text can
    never flip the comparison.
    """
    if local_max is None:
        return True
    return int(remote_latest) > int(local_max)


def normalize_candles(raw_candles: list) -> list[Candle]:
    """Normalize raw kline rows and order them by ascending open time."""
    return sorted(
        (Candle.from_raw(raw) for raw in raw_candles),
        key=lambda candle: candle.open_time,
    )


class SyncEngine:
    """Drives the check -> fetch -> normalize -> persist pipeline for one series.

    Args:
        provider: Market data client.
        repository: Candle store for the tracked series.
        settings: Symbol, timeframe and batch size.
    """

    def __init__(
        self,
        provider: MarketDataClient,
        repository: CandleRepository,
        settings: SyncSettings,
    ) -> None:
        self._provider = provider
        self._repository = repository
        self._settings = settings
        self._log = logger.bind(symbol=settings.symbol, timeframe=settings.timeframe)

    async def run_cycle(self) -> CycleResult:
        """Run one poll cycle to completion and report what happened."""
        symbol = self._settings.symbol
        timeframe = self._settings.timeframe

        # CHECKING STALENESS
        try:
            remote_latest = await self._provider.fetch_latest_candle_open_time(
                symbol, timeframe
            )
            local_max = await self._repository.get_max_open_time()
        except (ProviderUnavailable, StorageUnavailable, UnknownSymbol) as e:
            return self._failed(CycleResult(state=CycleState.FAILED), e)

        result = CycleResult(
            state=CycleState.UP_TO_DATE,
            remote_latest=remote_latest,
            local_max=local_max,
        )

        if remote_latest is None:
            self._log.warning("provider_returned_no_candles")
            return result

        if not is_stale(remote_latest, local_max):
            self._log.info(
                "candle_data_up_to_date",
                remote_latest=remote_latest,
                local_max=local_max,
            )
            return result

        # FETCHING
        self._log.info(
            "fetching_new_candles",
            remote_latest=remote_latest,
            local_max=local_max,
            batch_size=self._settings.batch_size,
        )
        try:
            raw_candles = await self._provider.fetch_candles(
                symbol, timeframe, self._settings.batch_size
            )
        except (ProviderUnavailable, UnknownSymbol) as e:
            return self._failed(result, e)

        result.fetched = len(raw_candles)
        try:
            candles = normalize_candles(raw_candles)
        except ValueError as e:
            return self._failed(result, e)

        # PERSISTING
        for candle in candles:
            try:
                await self._repository.insert(candle)
            except DuplicateKey:
                result.duplicates += 1
                self._log.debug("candle_already_stored", open_time=candle.open_time)
                continue
            except StorageUnavailable as e:
                return self._failed(result, e)
            result.inserted += 1
            self._log.debug("candle_inserted", open_time=candle.open_time)

        result.state = CycleState.SYNCED
        self._log.info(
            "candle_sync_complete",
            fetched=result.fetched,
            inserted=result.inserted,
            duplicates=result.duplicates,
        )
        return result

    def _failed(self, result: CycleResult, error: Exception) -> CycleResult:
        result.state = CycleState.FAILED
        result.error = str(error)
        self._log.error(
            "sync_cycle_failed",
            error_type=type(error).__name__,
            error=str(error),
            fetched=result.fetched,
            inserted=result.inserted,
        )
        return result
