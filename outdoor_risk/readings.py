"""
Normalization of weather payloads into validated models.

The risk engine assumes sanitized input. This module is the caller-side
boundary that maps an already-fetched, OpenWeather-shaped payload into
WeatherReading and ForecastEntry models and applies the documented
defaults (visibility 10000 m, feels-like equal to temperature).
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping

from pydantic import ValidationError

from outdoor_risk.errors import ReadingError
from outdoor_risk.schemas import DEFAULT_VISIBILITY_M, ForecastEntry, WeatherCondition, WeatherReading

REQUIRED_CURRENT_KEYS = ("temp", "humidity", "wind_speed")


def reading_from_payload(payload: Mapping[str, Any]) -> WeatherReading:
    """
    Build a WeatherReading from a dashboard or provider payload.

    Accepts either ``{"current": {...}}`` or the bare current block.

    Raises:
        ReadingError: If required keys are missing or values are invalid
    """
    current = payload.get("current", payload) if isinstance(payload, Mapping) else None
    if not isinstance(current, Mapping):
        raise ReadingError("Weather payload must be an object with current conditions")

    missing = [key for key in REQUIRED_CURRENT_KEYS if current.get(key) is None]
    if missing:
        raise ReadingError(f"Weather payload is missing required fields: {missing}")

    visibility = current.get("visibility")
    feels_like = current.get("feels_like")

    try:
        return WeatherReading(
            temp=current["temp"],
            feels_like=feels_like if feels_like is not None else current["temp"],
            humidity=current["humidity"],
            wind_speed=current["wind_speed"],
            visibility=visibility if visibility is not None else DEFAULT_VISIBILITY_M,
            conditions=_conditions(current.get("weather", [])),
            precipitation_probability=current.get("pop"),
            wind_deg=current.get("wind_deg"),
            uv_index=current.get("uv_index"),
        )
    except ValidationError as e:
        raise ReadingError(f"Invalid weather reading: {e}") from e


def forecast_from_payload(payload: Mapping[str, Any]) -> List[ForecastEntry]:
    """
    Build forecast entries from the ``forecast`` list of a payload.

    Each item carries ``dt`` (epoch seconds or ISO string), ``temp.min`` /
    ``temp.max``, ``weather``, ``pop``, ``wind_speed`` and ``humidity``.
    A payload without a forecast yields an empty list.

    Raises:
        ReadingError: If an item is missing fields or holds invalid values
    """
    items = payload.get("forecast") or []
    entries = []
    for index, item in enumerate(items):
        try:
            temp = item["temp"]
            entries.append(
                ForecastEntry(
                    dt=_parse_timestamp(item["dt"]),
                    temp_min=temp["min"],
                    temp_max=temp["max"],
                    conditions=_conditions(item.get("weather", [])),
                    pop=item.get("pop", 0.0),
                    wind_speed=item["wind_speed"],
                    humidity=item["humidity"],
                    visibility=item.get("visibility"),
                )
            )
        except (KeyError, TypeError) as e:
            raise ReadingError(f"Forecast item {index} is missing field {e}") from e
        except ValidationError as e:
            raise ReadingError(f"Invalid forecast item {index}: {e}") from e
    return entries


def _conditions(raw: Any) -> List[WeatherCondition]:
    if not isinstance(raw, list):
        raise ReadingError("Weather conditions must be a list")
    conditions = []
    for item in raw:
        if isinstance(item, str):
            conditions.append(WeatherCondition(main=item))
        elif isinstance(item, Mapping) and item.get("main"):
            conditions.append(
                WeatherCondition(
                    main=item["main"],
                    description=item.get("description"),
                    icon=item.get("icon"),
                )
            )
        else:
            raise ReadingError(f"Invalid weather condition: {item!r}")
    return conditions


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ReadingError(f"Forecast timestamp out of range: {value!r}") from e
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as e:
            raise ReadingError(f"Invalid forecast timestamp: {value!r}") from e
    raise ReadingError(f"Invalid forecast timestamp: {value!r}")

