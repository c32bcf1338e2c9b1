"""
API Request Models

Pydantic models for API request validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from outdoor_risk.schemas import ForecastEntry, Location, UserPreferences, WeatherReading


class AssessmentRequest(BaseModel):
    """Request model for activity-weighted assessment."""

    reading: WeatherReading = Field(..., description="Current weather conditions")
    activity_id: str = Field("general", description="Activity ID (e.g., 'hiking', 'cycling')")
    forecast: Optional[List[ForecastEntry]] = Field(
        None, description="Forecast slots used to find best time windows"
    )
    user_id: Optional[str] = Field(
        None, min_length=1, description="Record the assessment in this user's history"
    )
    location: Optional[Location] = Field(None, description="Location stored with the history entry")


class BasicAssessmentRequest(BaseModel):
    """Request model for comfort-threshold assessment."""

    reading: WeatherReading = Field(..., description="Current weather conditions")
    preferences: Optional[UserPreferences] = Field(
        None, description="Comfort thresholds (default: stored user preferences, then defaults)"
    )
    user_id: Optional[str] = Field(None, min_length=1, description="User whose stored preferences apply")


class OutlookRequest(BaseModel):
    """Request model for forecast outlook."""

    forecast: List[ForecastEntry] = Field(..., min_length=1, description="Forecast slots")
    activity_id: str = Field("general", description="Activity ID")
    days: int = Field(5, ge=1, le=16, description="Number of days to summarize")
