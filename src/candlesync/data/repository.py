"""Dedup-safe SQLite repository for candles.

Provides CandleRepository with typed methods for schema creation, reading
the sync cursor and inserting candles. All SQL is isolated behind this
interface.

The ``date`` column is INTEGER (open time in ms) with a unique index,
so the store itself rejects a second row for the same candle and the
max open time always comes back as an int.
"""

import aiosqlite

from candlesync.data.database import CandleDatabase
from candlesync.exceptions import DuplicateKey, StorageUnavailable
from candlesync.logging import get_logger
from candlesync.models import Candle

logger = get_logger(__name__)

DEFAULT_TABLE_NAME = "candlestickData"


def validate_table_name(table_name: str) -> str:
    """Return ``table_name`` if it is safe to interpolate into SQL, else raise ValueError."""
    if not table_name.isidentifier():
        raise ValueError(f"table_name must be a plain SQL identifier, got {table_name!r}")
    return table_name


class CandleRepository:
    """Async SQLite store for one symbol/timeframe candle series.

    Wraps CandleDatabase with typed read/write methods. Nothing is cached in
    memory; every call reads or writes the table.

    Usage:
        async with CandleDatabase("tradingData.db") as database:
            repository = CandleRepository(database)
            await repository.initialize_schema()
            await repository.insert(candle)
    """

    def __init__(
        self, database: CandleDatabase, table_name: str = DEFAULT_TABLE_NAME
    ) -> None:
        self._database = database
        self._table = validate_table_name(table_name)

    @property
    def table_name(self) -> str:
        return self._table

    async def initialize_schema(self) -> None:
        """Create the candle table and its unique open-time index. Safe on every startup.

        The index also covers tables created earlier without the UNIQUE
        column constraint. If such a table already holds duplicate open
        times the index cannot be built and StorageUnavailable is raised.
        """
        try:
            await self._database.db.execute(
                f"CREATE TABLE IF NOT EXISTS {self._table} ("
                "Id INTEGER PRIMARY KEY, "
                "date INTEGER NOT NULL UNIQUE, "
                "high REAL, "
                "low REAL, "
                "open REAL, "
                "close REAL, "
                "volume REAL"
                ")"
            )
            await self._database.db.execute(
                f"CREATE UNIQUE INDEX IF NOT EXISTS {self._table}_date_uq "
                f"ON {self._table}(date)"
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Cannot create table {self._table}: {e}") from e
        logger.info("candle_schema_ready", table=self._table)

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def insert(self, candle: Candle) -> None:
        """Append a candle row.

        Raises DuplicateKey if a row with the same open time exists and
        StorageUnavailable on any other store failure.
        """
        db = self._database.db
        try:
            await db.execute(
                f"INSERT INTO {self._table} (date, high, low, open, close, volume) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    candle.open_time,
                    candle.high,
                    candle.low,
                    candle.open,
                    candle.close,
                    candle.volume,
                ),
            )
            await db.commit()
        except aiosqlite.IntegrityError as e:
            await db.rollback()
            raise DuplicateKey(candle.open_time) from e
        except aiosqlite.Error as e:
            raise StorageUnavailable(
                f"Cannot insert candle {candle.open_time}: {e}"
            ) from e

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_max_open_time(self) -> int | None:
        """Return the largest stored open time, or None for an empty series."""
        row = await self._fetchone(f"SELECT MAX(date) FROM {self._table}")
        if row is None or row[0] is None:
            return None
        return int(row[0])

    async def count(self) -> int:
        """Return the number of stored candles."""
        row = await self._fetchone(f"SELECT COUNT(*) FROM {self._table}")
        return int(row[0]) if row else 0

    async def get_candles(
        self,
        since_ms: int | None = None,
        until_ms: int | None = None,
    ) -> list[Candle]:
        """Query candles within an optional open time range, ordered ascending."""
        conditions = []
        params: list = []

        if since_ms is not None:
            conditions.append("date >= ?")
            params.append(since_ms)
        if until_ms is not None:
            conditions.append("date <= ?")
            params.append(until_ms)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        try:
            cursor = await self._database.db.execute(
                f"SELECT date, open, high, low, close, volume "
                f"FROM {self._table}{where} ORDER BY date ASC",
                params,
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Cannot read {self._table}: {e}") from e
        return [
            Candle(
                open_time=int(row[0]),
                open=row[1],
                high=row[2],
                low=row[3],
                close=row[4],
                volume=row[5],
            )
            for row in rows
        ]

    async def _fetchone(self, query: str) -> tuple | None:
        try:
            cursor = await self._database.db.execute(query)
            return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Cannot read {self._table}: {e}") from e
