"""Tests for EPEX Monitor request window arithmetic."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from custom_components.epex_monitor.models import PriceWindow
from custom_components.epex_monitor.window import compute_window, format_wire_timestamp

UTC = timezone.utc


class TestFormatWireTimestamp:
    def test_compact_utc_format(self):
        assert format_wire_timestamp(datetime(2025, 1, 6, 13, 45, tzinfo=UTC)) == "202501061345"

    def test_zero_padded(self):
        assert format_wire_timestamp(datetime(2025, 3, 2, 4, 5, tzinfo=UTC)) == "202503020405"

    def test_seconds_truncated_not_rounded(self):
        instant = datetime(2025, 1, 6, 13, 59, 59, 999999, tzinfo=UTC)
        assert format_wire_timestamp(instant) == "202501061359"

    def test_converts_to_utc(self):
        instant = datetime(2025, 1, 6, 1, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_wire_timestamp(instant) == "202501052330"

    def test_naive_taken_as_utc(self):
        assert format_wire_timestamp(datetime(2025, 1, 6, 7, 0)) == "202501060700"

    def test_always_twelve_digits(self):
        for hour in range(24):
            text = format_wire_timestamp(datetime(2025, 12, 31, hour, 0, tzinfo=UTC))
            assert len(text) == 12
            assert text.isdigit()

    def test_idempotent_on_normalized_instant(self):
        instant = datetime(2025, 1, 6, 0, 0, tzinfo=UTC)
        text = format_wire_timestamp(instant)
        reparsed = datetime.strptime(text, "%Y%m%d%H%M").replace(tzinfo=UTC)
        assert reparsed == instant
        assert format_wire_timestamp(reparsed) == text


class TestComputeWindow:
    def test_starts_at_utc_midnight(self):
        window = compute_window(datetime(2025, 1, 6, 13, 45, 30, 500000, tzinfo=UTC))
        assert window.start == datetime(2025, 1, 6, 0, 0, tzinfo=UTC)

    def test_covers_48_hours(self):
        window = compute_window(datetime(2025, 1, 6, 13, 45, tzinfo=UTC))
        assert window.end == datetime(2025, 1, 8, 0, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "now",
        [
            datetime(2025, 1, 6, 0, 0, tzinfo=UTC),
            datetime(2025, 1, 6, 23, 59, 59, 999999, tzinfo=UTC),
            datetime(2024, 2, 29, 12, 0, tzinfo=UTC),
            datetime(2025, 3, 30, 1, 30, tzinfo=timezone(timedelta(hours=1))),
        ],
    )
    def test_length_is_always_48_hours(self, now):
        window = compute_window(now)
        assert window.end - window.start == timedelta(hours=48)

    def test_exact_midnight_stays_on_same_day(self):
        window = compute_window(datetime(2025, 1, 6, 0, 0, tzinfo=UTC))
        assert format_wire_timestamp(window.start) == "202501060000"
        assert format_wire_timestamp(window.end) == "202501080000"

    def test_local_time_uses_utc_day(self):
        # 00:30 in UTC+2 is still the previous day in UTC
        window = compute_window(datetime(2025, 1, 6, 0, 30, tzinfo=timezone(timedelta(hours=2))))
        assert window.start == datetime(2025, 1, 5, 0, 0, tzinfo=UTC)

    def test_naive_now(self):
        window = compute_window(datetime(2025, 1, 6, 10, 0))
        assert window.start == datetime(2025, 1, 6, 0, 0, tzinfo=UTC)


def test_price_window_rejects_empty_interval():
    instant = datetime(2025, 1, 6, tzinfo=UTC)
    with pytest.raises(ValueError):
        PriceWindow(start=instant, end=instant)
