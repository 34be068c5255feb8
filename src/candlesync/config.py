"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from candlesync.data.repository import validate_table_name


class ProviderSettings(BaseSettings):
    """Market data provider connection settings."""

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")

    exchange_id: str = "binance"
    testnet: bool = True  # https://testnet.binance.vision/api/v3


class SyncSettings(BaseSettings):
    """Incremental candle sync parameters.

    All fields configurable via SYNC_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    symbol: str = "BTCUSDT"  # exchange-native id, not the ccxt unified symbol
    timeframe: str = "1m"
    batch_size: int = Field(default=10, ge=1, le=1000)  # Binance kline limit is 1000
    poll_interval_ms: int = Field(default=5000, gt=0)
    run_once: bool = False

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000


class StoreSettings(BaseSettings):
    """SQLite candle store location and table name."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    db_path: str = "tradingData.db"
    table_name: str = "candlestickData"

    @field_validator("table_name")
    @classmethod
    def _plain_identifier(cls, value: str) -> str:
        return validate_table_name(value)


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    provider: ProviderSettings = ProviderSettings()
    sync: SyncSettings = SyncSettings()
    store: StoreSettings = StoreSettings()
