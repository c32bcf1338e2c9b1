"""
Forecast outlook and best time windows.

Two views over a list of forecast slots:
- a coarse low/medium/high outlook per slot and per day, from simple
  point thresholds against the activity's optimal conditions
- best time windows: contiguous runs of slots whose full activity-weighted
  score stays at or above a threshold
"""

from collections import OrderedDict
from datetime import date, timedelta, timezone
from typing import List, Sequence

from pydantic import BaseModel, Field

from outdoor_risk.schemas import (
    TEMPERATURE_ACCEPTABLE_MARGIN,
    WIND_ACCEPTABLE_FACTOR,
    ActivityProfile,
    BasicRiskTier,
    ForecastEntry,
    TimeWindow,
)


class ForecastDay(BaseModel):
    """Daily aggregate of forecast slots."""

    day: date
    temp_min: float
    temp_max: float
    pop: float = Field(..., description="Highest slot precipitation probability")
    wind_speed: float = Field(..., description="Highest slot wind speed")
    humidity: float = Field(..., description="Highest slot humidity")
    outlook: BasicRiskTier
    slots: int


def forecast_outlook(entry: ForecastEntry, activity: ActivityProfile) -> BasicRiskTier:
    """
    Coarse outlook for one forecast slot.

    Points:
    - mean temperature outside the optimal range widened by 5°C: +3,
      otherwise outside the optimal range: +1
    - wind above 1.5x the activity maximum: +2, above the maximum: +1
    - precipitation probability above 0.7: +2, above 0.3: +1

    Tier: >= 4 high, >= 2 medium, else low.
    """
    conditions = activity.optimal_conditions
    low, high = conditions.temp_range
    temp = entry.mean_temp
    points = 0

    if temp < low - TEMPERATURE_ACCEPTABLE_MARGIN or temp > high + TEMPERATURE_ACCEPTABLE_MARGIN:
        points += 3
    elif temp < low or temp > high:
        points += 1

    if entry.wind_speed > conditions.max_wind * WIND_ACCEPTABLE_FACTOR:
        points += 2
    elif entry.wind_speed > conditions.max_wind:
        points += 1

    if entry.pop > 0.7:
        points += 2
    elif entry.pop > 0.3:
        points += 1

    if points >= 4:
        return BasicRiskTier.HIGH
    if points >= 2:
        return BasicRiskTier.MEDIUM
    return BasicRiskTier.LOW


def summarize_days(
    entries: Sequence[ForecastEntry],
    activity: ActivityProfile,
    days: int = 5,
) -> List[ForecastDay]:
    """Group slots by UTC calendar date and compute a daily outlook."""
    grouped: "OrderedDict[date, List[ForecastEntry]]" = OrderedDict()
    for entry in sorted(entries, key=lambda e: e.dt):
        grouped.setdefault(_utc_date(entry), []).append(entry)

    summaries = []
    for day, slots in list(grouped.items())[:days]:
        aggregate = ForecastEntry(
            dt=slots[0].dt,
            temp_min=min(slot.temp_min for slot in slots),
            temp_max=max(slot.temp_max for slot in slots),
            pop=max(slot.pop for slot in slots),
            wind_speed=max(slot.wind_speed for slot in slots),
            humidity=max(slot.humidity for slot in slots),
        )
        summaries.append(
            ForecastDay(
                day=day,
                temp_min=aggregate.temp_min,
                temp_max=aggregate.temp_max,
                pop=aggregate.pop,
                wind_speed=aggregate.wind_speed,
                humidity=aggregate.humidity,
                outlook=forecast_outlook(aggregate, activity),
                slots=len(slots),
            )
        )
    return summaries


def find_best_windows(
    entries: Sequence[ForecastEntry],
    activity: ActivityProfile,
    aggregator,
    threshold: int = 60,
    slot_hours: float = 3.0,
) -> List[TimeWindow]:
    """
    Find contiguous forecast slots that score at or above ``threshold``.

    Args:
        entries: Forecast slots, in any order
        activity: Activity to score against
        aggregator: RiskAggregator used to score each slot
        threshold: Minimum score for a slot to join a window
        slot_hours: Duration of each slot, used for the window end time

    Returns:
        Windows sorted by peak score (best first), ties by start time.
        Slots further apart than ``slot_hours`` never share a window.
    """
    if not entries:
        return []

    scored = [
        (entry, aggregator.assess(entry.to_reading(), activity).score)
        for entry in sorted(entries, key=lambda e: e.dt)
    ]

    slot = timedelta(hours=slot_hours)
    windows: List[TimeWindow] = []
    current: List[tuple] = []

    for entry, score in scored:
        # A gap longer than one slot ends the run
        if current and entry.dt - current[-1][0].dt > slot:
            windows.append(_build_window(current, activity, slot_hours))
            current = []

        if score >= threshold:
            current.append((entry, score))
        elif current:
            windows.append(_build_window(current, activity, slot_hours))
            current = []

    if current:
        windows.append(_build_window(current, activity, slot_hours))

    return sorted(windows, key=lambda w: (-w.score, w.start))


def _build_window(run: List[tuple], activity: ActivityProfile, slot_hours: float) -> TimeWindow:
    scores = [score for _, score in run]
    peak = max(scores)
    return TimeWindow(
        start=run[0][0].dt,
        end=run[-1][0].dt + timedelta(hours=slot_hours),
        score=peak,
        average_score=round(sum(scores) / len(scores), 1),
        reason=f"Favourable conditions for {activity.name} (peak score {peak})",
    )


def _utc_date(entry: ForecastEntry) -> date:
    if entry.dt.tzinfo is None:
        return entry.dt.date()
    return entry.dt.astimezone(timezone.utc).date()
