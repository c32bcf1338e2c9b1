"""
Tests for forecast outlook and best time windows.

The mild fixture has ten 3-hour slots starting 2024-06-01 00:00 UTC. For
hiking they score 94, 94, 49, 100, 94, 100, 100, 49, 100, 100.
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.forecast import find_best_windows, forecast_outlook, summarize_days
from outdoor_risk.readings import forecast_from_payload
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.schemas import BasicRiskTier, ForecastEntry

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def registry():
    return ActivityRegistry.default()


@pytest.fixture
def hiking(registry):
    return registry.get_by_id("hiking")


@pytest.fixture
def aggregator(registry):
    return RiskAggregator(registry)


@pytest.fixture
def forecast():
    with open(FIXTURES / "weather_mild.json") as f:
        return forecast_from_payload(json.load(f))


def _utc(day, hour):
    return datetime(2024, 6, day, hour, 0, tzinfo=timezone.utc)


# Best time windows


def test_windows_ranked_by_peak_then_start(forecast, hiking, aggregator):
    windows = find_best_windows(forecast, hiking, aggregator)

    assert [(w.start, w.end) for w in windows] == [
        (_utc(1, 9), _utc(1, 21)),
        (_utc(2, 0), _utc(2, 6)),
        (_utc(1, 0), _utc(1, 6)),
    ]
    assert [w.score for w in windows] == [100, 100, 94]


def test_window_average_and_reason(forecast, hiking, aggregator):
    best = find_best_windows(forecast, hiking, aggregator)[0]

    assert best.average_score == 98.5
    assert best.reason == "Favourable conditions for Hiking & Trekking (peak score 100)"


def test_window_order_does_not_depend_on_input_order(forecast, hiking, aggregator):
    shuffled = list(reversed(forecast))

    assert find_best_windows(shuffled, hiking, aggregator) == find_best_windows(forecast, hiking, aggregator)


def test_higher_threshold_splits_windows(forecast, hiking, aggregator):
    windows = find_best_windows(forecast, hiking, aggregator, threshold=95)

    assert [(w.start, w.end) for w in windows] == [
        (_utc(1, 9), _utc(1, 12)),
        (_utc(1, 15), _utc(1, 21)),
        (_utc(2, 0), _utc(2, 6)),
    ]


def test_slot_hours_sets_window_end(forecast, hiking, aggregator):
    """Three-hourly slots read as one-hour slots leave a gap after each one."""
    windows = find_best_windows(forecast, hiking, aggregator, slot_hours=1)

    assert len(windows) == 8
    assert (windows[0].start, windows[0].end) == (_utc(1, 9), _utc(1, 10))


def test_gap_in_forecast_splits_window(hiking, aggregator):
    """Favourable slots two days apart are separate windows."""
    entries = [
        ForecastEntry(dt=_utc(1, 9), temp_min=17, temp_max=19, wind_speed=3, humidity=50),
        ForecastEntry(dt=_utc(3, 9), temp_min=17, temp_max=19, wind_speed=3, humidity=50),
    ]

    windows = find_best_windows(entries, hiking, aggregator, slot_hours=3)

    assert [(w.start, w.end) for w in windows] == [
        (_utc(1, 9), _utc(1, 12)),
        (_utc(3, 9), _utc(3, 12)),
    ]


def test_no_window_above_threshold(forecast, hiking, aggregator):
    assert find_best_windows(forecast, hiking, aggregator, threshold=101) == []


def test_empty_forecast(hiking, aggregator):
    assert find_best_windows([], hiking, aggregator) == []


# Outlook


def test_slot_outlook(forecast, hiking):
    """06:00 slot: 5°C (+1), wind 25 > 20 (+1), pop 0.9 (+2): high."""
    assert forecast_outlook(forecast[2], hiking) == BasicRiskTier.HIGH
    assert forecast_outlook(forecast[3], hiking) == BasicRiskTier.LOW


def test_outlook_extreme_temperature():
    entry = ForecastEntry(dt=_utc(1, 12), temp_min=34, temp_max=36, wind_speed=2, humidity=40)
    general = ActivityRegistry.default().get_by_id("general")

    # 35 > 25 + 5: +3
    assert forecast_outlook(entry, general) == BasicRiskTier.MEDIUM


def test_summarize_days(forecast, hiking):
    days = summarize_days(forecast, hiking)

    assert [day.day for day in days] == [date(2024, 6, 1), date(2024, 6, 2)]

    first = days[0]
    assert first.slots == 8
    assert (first.temp_min, first.temp_max) == (4, 22)
    assert first.pop == 0.9
    assert first.wind_speed == 25
    assert first.humidity == 90
    assert first.outlook == BasicRiskTier.MEDIUM

    second = days[1]
    assert second.slots == 2
    assert second.outlook == BasicRiskTier.LOW


def test_summarize_days_limit(forecast, hiking):
    assert len(summarize_days(forecast, hiking, days=1)) == 1
