"""
Pydantic models for outdoor activity risk assessment.

This module defines the core data structures for:
- Activity Profiles: per-factor weights and optimal/acceptable condition bounds
- Weather Readings: validated current conditions supplied by the caller
- User Preferences: comfort thresholds used by the basic assessor
- Assessments: factor breakdowns, recommendations and overall risk tiers
"""

import math
import re
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Conventions used to derive acceptable bounds when a profile omits them
TEMPERATURE_ACCEPTABLE_MARGIN = 5.0
WIND_ACCEPTABLE_FACTOR = 1.5
PRECIPITATION_ACCEPTABLE_FACTOR = 2.0
HUMIDITY_ACCEPTABLE_FACTOR = 1.2
VISIBILITY_ACCEPTABLE_FACTOR = 0.5

# Visibility assumed when a weather source omits it
DEFAULT_VISIBILITY_M = 10000.0

ACTIVITY_ID_PATTERN = re.compile(r"[a-z0-9_-]+")


# ============================================================================
# Enumerations
# ============================================================================

class Factor(str, Enum):
    """The five independently scored weather dimensions."""
    TEMPERATURE = "temperature"
    WIND = "wind"
    PRECIPITATION = "precipitation"
    HUMIDITY = "humidity"
    VISIBILITY = "visibility"


class FactorStatus(str, Enum):
    """Qualitative classification of a single factor, best first."""
    OPTIMAL = "optimal"
    ACCEPTABLE = "acceptable"
    POOR = "poor"
    DANGEROUS = "dangerous"

    @property
    def rank(self) -> int:
        """0 for optimal up to 3 for dangerous."""
        return list(FactorStatus).index(self)


class RiskTier(str, Enum):
    """Overall tier produced by the activity-weighted engine."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


class BasicRiskTier(str, Enum):
    """Overall tier produced by the basic threshold assessor."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Priority(str, Enum):
    """Recommendation priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TemperatureStatus(str, Enum):
    COMFORTABLE = "comfortable"
    HOT = "hot"
    COLD = "cold"


class WindStatus(str, Enum):
    CALM = "calm"
    BREEZY = "breezy"
    WINDY = "windy"


class PrecipitationStatus(str, Enum):
    DRY = "dry"
    LIGHT = "light"
    HEAVY = "heavy"


class HumidityStatus(str, Enum):
    COMFORTABLE = "comfortable"
    HUMID = "humid"


# ============================================================================
# Activity Profile Components
# ============================================================================


class FactorWeights(BaseModel):
    """
    Linear combination coefficients for the five factors.

    Weights are used as-is; they are not renormalized, so a profile whose
    weights do not sum to 1 scales the overall score accordingly.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., ge=0.0, le=1.0)
    wind: float = Field(..., ge=0.0, le=1.0)
    precipitation: float = Field(..., ge=0.0, le=1.0)
    humidity: float = Field(..., ge=0.0, le=1.0)
    visibility: float = Field(..., ge=0.0, le=1.0)

    def get(self, factor: Factor) -> float:
        return getattr(self, factor.value)

    def total(self) -> float:
        return sum(self.get(factor) for factor in Factor)


class OptimalConditions(BaseModel):
    """
    Ideal and acceptable condition bounds for an activity.

    Acceptable bounds may be given explicitly. When omitted they are derived
    from the optimal bounds: temperature widened by 5°C on each side, wind
    x1.5, precipitation x2, humidity x1.2 and visibility x0.5.
    """

    model_config = ConfigDict(frozen=True)

    temp_range: Tuple[float, float] = Field(
        ...,
        description="Optimal temperature range [min, max] in °C"
    )
    max_wind: float = Field(..., gt=0, description="Optimal maximum wind speed (m/s)")
    max_precipitation: float = Field(
        ...,
        gt=0,
        le=1.0,
        description="Optimal maximum precipitation probability (0-1)"
    )
    max_humidity: float = Field(..., gt=0, description="Optimal maximum relative humidity (%)")
    min_visibility: float = Field(..., gt=0, description="Optimal minimum visibility (meters)")

    acceptable_temp_range: Tuple[float, float] = Field(
        ...,
        description="Acceptable temperature range [min, max] in °C"
    )
    acceptable_wind: float = Field(..., gt=0)
    acceptable_precipitation: float = Field(..., gt=0)
    acceptable_humidity: float = Field(..., gt=0)
    acceptable_visibility: float = Field(..., gt=0)

    @model_validator(mode="before")
    @classmethod
    def fill_acceptable_bounds(cls, data):
        """Derive any acceptable bound the definition leaves out."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        temp_range = data.get("temp_range")
        if data.get("acceptable_temp_range") is None and _is_numeric_pair(temp_range):
            low, high = temp_range
            data["acceptable_temp_range"] = (
                low - TEMPERATURE_ACCEPTABLE_MARGIN,
                high + TEMPERATURE_ACCEPTABLE_MARGIN,
            )

        derived = (
            ("acceptable_wind", "max_wind", WIND_ACCEPTABLE_FACTOR),
            ("acceptable_precipitation", "max_precipitation", PRECIPITATION_ACCEPTABLE_FACTOR),
            ("acceptable_humidity", "max_humidity", HUMIDITY_ACCEPTABLE_FACTOR),
            ("acceptable_visibility", "min_visibility", VISIBILITY_ACCEPTABLE_FACTOR),
        )
        for target, source, factor in derived:
            value = data.get(source)
            if data.get(target) is None and isinstance(value, (int, float)):
                data[target] = value * factor

        return data

    @model_validator(mode="after")
    def validate_bounds(self):
        """Ranges must be ordered and acceptable bounds must be the tolerant side."""
        opt_min, opt_max = self.temp_range
        if opt_min >= opt_max:
            raise ValueError(
                f"temp_range must be increasing, got [{opt_min}, {opt_max}]"
            )

        acc_min, acc_max = self.acceptable_temp_range
        if acc_min > opt_min or acc_max < opt_max:
            raise ValueError(
                f"acceptable_temp_range [{acc_min}, {acc_max}] must contain "
                f"temp_range [{opt_min}, {opt_max}]"
            )

        if self.acceptable_wind < self.max_wind:
            raise ValueError("acceptable_wind must be >= max_wind")
        if self.acceptable_precipitation < self.max_precipitation:
            raise ValueError("acceptable_precipitation must be >= max_precipitation")
        if self.acceptable_humidity < self.max_humidity:
            raise ValueError("acceptable_humidity must be >= max_humidity")
        if self.acceptable_visibility > self.min_visibility:
            raise ValueError("acceptable_visibility must be <= min_visibility")

        return self


class ActivityProfile(BaseModel):
    """A named bundle of factor weights and condition bounds for one activity."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique slug of lowercase letters, digits, _ and -, e.g. 'hiking'")
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    weights: FactorWeights
    optimal_conditions: OptimalConditions

    @field_validator("id")
    @classmethod
    def validate_id_format(cls, v: str) -> str:
        """Ensure the id is a lowercase slug."""
        if not ACTIVITY_ID_PATTERN.fullmatch(v):
            raise ValueError(f"Activity id must be a lowercase slug, got '{v}'")
        return v


# ============================================================================
# Weather Inputs
# ============================================================================


class WeatherCondition(BaseModel):
    """A provider condition tag such as 'Rain' or 'Thunderstorm'."""

    model_config = ConfigDict(frozen=True)

    main: str = Field(..., description="Condition group, e.g. 'Rain'")
    description: Optional[str] = None
    icon: Optional[str] = None


class WeatherReading(BaseModel):
    """
    Current conditions for one location, already sanitized by the caller.

    The engine applies no implicit defaults; a provider that omits visibility
    is defaulted by the reading normalizer before a WeatherReading is built.
    """

    model_config = ConfigDict(frozen=True)

    temp: float = Field(..., allow_inf_nan=False, description="Air temperature (°C)")
    feels_like: float = Field(..., allow_inf_nan=False, description="Apparent temperature (°C)")
    humidity: float = Field(..., ge=0, le=100, allow_inf_nan=False, description="Relative humidity (%)")
    wind_speed: float = Field(..., ge=0, allow_inf_nan=False, description="Wind speed (m/s)")
    visibility: float = Field(..., ge=0, allow_inf_nan=False, description="Visibility (meters)")
    conditions: List[WeatherCondition] = Field(default_factory=list)
    precipitation_probability: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        allow_inf_nan=False,
        description="Probability of precipitation (0-1) when the source provides one"
    )
    wind_deg: Optional[float] = Field(None, allow_inf_nan=False)
    uv_index: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    def has_condition(self, *keywords: str) -> bool:
        """Case-insensitive substring match of any keyword against the condition tags."""
        tags = [condition.main.lower() for condition in self.conditions]
        return any(keyword.lower() in tag for tag in tags for keyword in keywords)

    def condition_summary(self) -> str:
        return ", ".join(condition.main for condition in self.conditions)


class ForecastEntry(BaseModel):
    """One forecast slot (typically three hours) for a location."""

    model_config = ConfigDict(frozen=True)

    dt: datetime = Field(..., description="Slot start time")
    temp_min: float = Field(..., allow_inf_nan=False)
    temp_max: float = Field(..., allow_inf_nan=False)
    conditions: List[WeatherCondition] = Field(default_factory=list)
    pop: float = Field(0.0, ge=0.0, le=1.0, description="Probability of precipitation (0-1)")
    wind_speed: float = Field(..., ge=0, allow_inf_nan=False)
    humidity: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    visibility: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def validate_temperature_order(self):
        if self.temp_min > self.temp_max:
            raise ValueError(f"temp_min ({self.temp_min}) must not exceed temp_max ({self.temp_max})")
        return self

    @property
    def mean_temp(self) -> float:
        return (self.temp_min + self.temp_max) / 2

    def to_reading(self) -> "WeatherReading":
        """Build a reading from this slot, using pop as the precipitation probability."""
        return WeatherReading(
            temp=self.mean_temp,
            feels_like=self.mean_temp,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            visibility=self.visibility if self.visibility is not None else DEFAULT_VISIBILITY_M,
            conditions=list(self.conditions),
            precipitation_probability=self.pop,
        )


class Location(BaseModel):
    """A named coordinate the user assessed."""

    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class UserPreferences(BaseModel):
    """User-owned comfort thresholds for the basic assessor."""

    model_config = ConfigDict(populate_by_name=True)

    very_hot: float = Field(30.0, alias="veryHot", allow_inf_nan=False, description="Hot threshold (°C)")
    very_cold: float = Field(5.0, alias="veryCold", allow_inf_nan=False, description="Cold threshold (°C)")
    very_windy: float = Field(20.0, alias="veryWindy", gt=0, description="Wind threshold (m/s)")
    very_wet: float = Field(0.7, alias="veryWet", ge=0.0, le=1.0, description="Precipitation probability threshold")
    very_humid: float = Field(80.0, alias="veryHumid", ge=0, le=100, description="Humidity threshold (%)")
    preferred_activity: str = Field("general", alias="preferredActivity")

    @model_validator(mode="after")
    def validate_temperature_thresholds(self):
        if self.very_cold >= self.very_hot:
            raise ValueError(
                f"very_cold ({self.very_cold}) must be below very_hot ({self.very_hot})"
            )
        return self


# ============================================================================
# Assessment Results
# ============================================================================


class FactorAssessment(BaseModel):
    """Score, status and explanation for a single factor."""

    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    impact: str


class FactorAssessments(BaseModel):
    """One FactorAssessment per factor."""

    temperature: FactorAssessment
    wind: FactorAssessment
    precipitation: FactorAssessment
    humidity: FactorAssessment
    visibility: FactorAssessment

    def get(self, factor: Factor) -> FactorAssessment:
        return getattr(self, factor.value)

    def items(self) -> Iterator[Tuple[Factor, FactorAssessment]]:
        for factor in Factor:
            yield factor, self.get(factor)


class Recommendation(BaseModel):
    priority: Priority
    message: str
    action: Optional[str] = None


class TimeWindow(BaseModel):
    """A contiguous run of forecast slots that score above a threshold."""

    start: datetime
    end: datetime
    score: int = Field(..., description="Peak score within the window")
    average_score: float
    reason: str


class EnhancedRiskAssessment(BaseModel):
    """Result of the activity-weighted engine."""

    overall: RiskTier
    score: int = Field(..., ge=0, description="Weighted aggregate, 0-100 for catalogs whose weights sum to 1")
    factors: FactorAssessments
    recommendations: List[Recommendation] = Field(default_factory=list)
    best_time_windows: List[TimeWindow] = Field(default_factory=list)


class BasicRiskFactors(BaseModel):
    temperature: TemperatureStatus = TemperatureStatus.COMFORTABLE
    wind: WindStatus = WindStatus.CALM
    precipitation: PrecipitationStatus = PrecipitationStatus.DRY
    humidity: HumidityStatus = HumidityStatus.COMFORTABLE


class BasicRiskAssessment(BaseModel):
    """Result of the basic threshold assessor."""

    overall: BasicRiskTier
    risk_score: int = Field(..., ge=0, description="Additive threshold points")
    factors: BasicRiskFactors
    recommendations: List[str] = Field(default_factory=list)


def _is_numeric_pair(value) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(isinstance(v, (int, float)) and math.isfinite(v) for v in value)
    )
