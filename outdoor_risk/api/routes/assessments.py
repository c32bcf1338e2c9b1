"""
Assessments API Routes

Endpoints for activity-weighted and comfort-threshold assessments.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from outdoor_risk.api.dependencies import get_aggregator
from outdoor_risk.api.models.requests import AssessmentRequest, BasicAssessmentRequest
from outdoor_risk.basic_risk import assess_basic
from outdoor_risk.database import HistoryStore, PreferenceStore, get_db_session
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.schemas import BasicRiskAssessment, EnhancedRiskAssessment, UserPreferences
from outdoor_risk.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/assessments", response_model=EnhancedRiskAssessment)
def create_assessment(
    request: AssessmentRequest,
    aggregator: RiskAggregator = Depends(get_aggregator),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> EnhancedRiskAssessment:
    """
    Assess current conditions for an activity.

    Scores temperature, wind, precipitation, humidity and visibility against
    the activity profile, weights them into an overall score and tier, and
    generates recommendations. With a forecast, best time windows are added.

    When ``user_id`` is given the assessment is recorded in that user's history.

    Args:
        request: AssessmentRequest with reading, activity ID and optional forecast

    Returns:
        EnhancedRiskAssessment
    """
    profile = aggregator.resolve(request.activity_id)
    assessment = aggregator.assess(
        request.reading,
        profile,
        forecast=request.forecast,
        window_threshold=settings.BEST_WINDOW_THRESHOLD,
        slot_hours=settings.FORECAST_SLOT_HOURS,
    )

    if request.user_id:
        HistoryStore(db, max_items=settings.MAX_HISTORY_ITEMS).record(
            request.user_id,
            assessment,
            request.reading,
            profile.id,
            location=request.location,
        )

    logger.info(
        "Assessment for '%s': %s (%d)", profile.id, assessment.overall.value, assessment.score
    )
    return assessment


@router.post("/assessments/basic", response_model=BasicRiskAssessment)
def create_basic_assessment(
    request: BasicAssessmentRequest,
    db: Session = Depends(get_db_session),
) -> BasicRiskAssessment:
    """
    Check current conditions against comfort thresholds.

    Thresholds come from the request, else from the user's stored
    preferences, else from the defaults.
    """
    preferences = request.preferences
    if preferences is None:
        if request.user_id:
            preferences = PreferenceStore(db).get_or_default(request.user_id)
        else:
            preferences = UserPreferences()

    return assess_basic(request.reading, preferences)
