"""Shared test fixtures for the candle sync service."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from candlesync.config import SyncSettings
from candlesync.data.database import CandleDatabase
from candlesync.data.repository import CandleRepository


@pytest.fixture
def sync_settings() -> SyncSettings:
    """SyncSettings with the service defaults and a short poll interval."""
    return SyncSettings(
        symbol="BTCUSDT",
        timeframe="1m",
        batch_size=10,
        poll_interval_ms=50,
    )


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[CandleDatabase]:
    """Connected CandleDatabase backed by a temporary SQLite file."""
    async with CandleDatabase(str(tmp_path / "candles.db")) as db:
        yield db


@pytest_asyncio.fixture
async def repository(database: CandleDatabase) -> CandleRepository:
    """CandleRepository with its schema created."""
    repo = CandleRepository(database)
    await repo.initialize_schema()
    return repo

