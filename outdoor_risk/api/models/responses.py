"""
API Response Models

Pydantic models for API responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from outdoor_risk.database import ActivityStats, FavoriteLocation, HistoryEntry, ImportSummary
from outdoor_risk.forecast import ForecastDay
from outdoor_risk.schemas import TimeWindow


class ActivityInfo(BaseModel):
    """Brief activity information for listing."""

    id: str = Field(..., description="Activity ID")
    name: str = Field(..., description="Human-readable name")
    description: str = Field(..., description="One-line description")


class ActivitiesListResponse(BaseModel):
    """Response for GET /api/activities."""

    activities: List[ActivityInfo] = Field(..., description="Available activities")
    count: int = Field(..., description="Total number of activities")


class OutlookResponse(BaseModel):
    """Response for POST /api/forecast/outlook."""

    activity_id: str = Field(..., description="Activity the outlook was computed for")
    days: List[ForecastDay] = Field(..., description="Per-day outlook")
    best_time_windows: List[TimeWindow] = Field(
        default_factory=list, description="Windows scoring at or above the threshold"
    )


class HistoryResponse(BaseModel):
    """Response for GET /api/users/{user_id}/history."""

    user_id: str
    entries: List[HistoryEntry] = Field(..., description="Assessments, newest first")
    count: int


class ClearHistoryResponse(BaseModel):
    """Response for DELETE /api/users/{user_id}/history."""

    user_id: str
    deleted: int = Field(..., description="Number of entries removed")


class StatsResponse(BaseModel):
    """Response for GET /api/users/{user_id}/stats."""

    user_id: str
    activities: Dict[str, ActivityStats] = Field(..., description="Usage per activity ID")
    total_queries: int
    average_score: float = Field(..., description="Mean score over all recorded assessments")
    most_used_activity: Optional[str] = Field(None, description="Activity assessed most often")
    favorite_locations_count: int


class FavoritesResponse(BaseModel):
    """Response for GET /api/users/{user_id}/favorites."""

    user_id: str
    favorites: List[FavoriteLocation] = Field(..., description="Most recently used first")
    count: int


class RemoveFavoriteResponse(BaseModel):
    """Response for DELETE /api/users/{user_id}/favorites/{favorite_id}."""

    user_id: str
    favorite_id: int


class ImportResponse(BaseModel):
    """Response for POST /api/users/{user_id}/import."""

    user_id: str
    imported: ImportSummary


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional details")
