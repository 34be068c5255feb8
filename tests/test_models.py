"""Tests for Candle normalization and price-side models."""

import pytest

from candlesync.models import Candle, InvalidDirection, PriceSide


class TestCandleFromRaw:
    """Tests for normalizing raw kline rows."""

    def test_round_trip_numeric_tuple(self) -> None:
        candle = Candle.from_raw([1700000000000, 100.0, 105.0, 99.0, 102.0, 50.0])
        assert candle == Candle(
            open_time=1700000000000,
            open=100.0,
            high=105.0,
            low=99.0,
            close=102.0,
            volume=50.0,
        )

    def test_string_prices_are_parsed(self) -> None:
        """Binance sends prices and volume as strings."""
        candle = Candle.from_raw(
            [1700000000000, "100.5", "105.25", "99.75", "102.0", "50.125"]
        )
        assert candle.open == 100.5
        assert candle.high == 105.25
        assert candle.low == 99.75
        assert candle.volume == 50.125

    def test_open_time_is_int(self) -> None:
        candle = Candle.from_raw(["1700000000000", 1, 2, 0.5, 1.5, 10])
        assert candle.open_time == 1700000000000
        assert isinstance(candle.open_time, int)

    def test_extra_fields_ignored(self) -> None:
        raw = [60_000, "1", "2", "0.5", "1.5", "10", 119_999, "15.0", 7, "5", "7.5", "0"]
        candle = Candle.from_raw(raw)
        assert candle.open_time == 60_000
        assert candle.close == 1.5

    def test_short_row_raises(self) -> None:
        with pytest.raises(ValueError, match="at least 6 fields"):
            Candle.from_raw([1700000000000, 100.0, 105.0])

    def test_non_numeric_value_raises(self) -> None:
        with pytest.raises(ValueError, match="Malformed"):
            Candle.from_raw([1700000000000, "abc", 105.0, 99.0, 102.0, 50.0])

    def test_none_value_raises(self) -> None:
        with pytest.raises(ValueError):
            Candle.from_raw([1700000000000, 100.0, None, 99.0, 102.0, 50.0])

    def test_candle_is_immutable(self) -> None:
        candle = Candle.from_raw([1, 1, 1, 1, 1, 1])
        with pytest.raises(AttributeError):
            candle.open_time = 2  # type: ignore[misc]


class TestPriceSide:
    """Tests for PriceSide and InvalidDirection."""

    def test_valid_sides(self) -> None:
        assert PriceSide("ask") is PriceSide.ASK
        assert PriceSide("bid") is PriceSide.BID

    def test_unknown_side_raises(self) -> None:
        with pytest.raises(ValueError):
            PriceSide("mid")

    def test_invalid_direction_message(self) -> None:
        err = InvalidDirection("mid")
        assert err.direction == "mid"
        assert "'mid'" in err.message
