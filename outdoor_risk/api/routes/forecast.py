"""
Forecast API Routes

Endpoint for per-day outlook and best time windows.
"""

from fastapi import APIRouter, Depends

from outdoor_risk.api.dependencies import get_aggregator
from outdoor_risk.api.models.requests import OutlookRequest
from outdoor_risk.api.models.responses import OutlookResponse
from outdoor_risk.forecast import find_best_windows, summarize_days
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.settings import Settings, get_settings

router = APIRouter()


@router.post("/forecast/outlook", response_model=OutlookResponse)
async def get_forecast_outlook(
    request: OutlookRequest,
    aggregator: RiskAggregator = Depends(get_aggregator),
    settings: Settings = Depends(get_settings),
) -> OutlookResponse:
    """
    Summarize a forecast per day and find the best time windows.

    Each day gets a low/medium/high outlook from its worst slot values.
    Windows are contiguous slots whose activity score stays at or above
    BEST_WINDOW_THRESHOLD.
    """
    profile = aggregator.resolve(request.activity_id)

    return OutlookResponse(
        activity_id=profile.id,
        days=summarize_days(request.forecast, profile, days=request.days),
        best_time_windows=find_best_windows(
            request.forecast,
            profile,
            aggregator=aggregator,
            threshold=settings.BEST_WINDOW_THRESHOLD,
            slot_hours=settings.FORECAST_SLOT_HOURS,
        ),
    )
