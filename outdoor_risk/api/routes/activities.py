"""
Activities API Routes

Endpoints for listing and retrieving activity profiles.
"""

from fastapi import APIRouter, Depends

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.api.dependencies import get_registry
from outdoor_risk.api.models.responses import ActivitiesListResponse, ActivityInfo
from outdoor_risk.schemas import ActivityProfile

router = APIRouter()


@router.get("/activities", response_model=ActivitiesListResponse)
async def list_activities(
    registry: ActivityRegistry = Depends(get_registry),
) -> ActivitiesListResponse:
    """
    List all available activities in catalog order.

    Returns:
        ActivitiesListResponse with id, name and description per activity
    """
    activities = [
        ActivityInfo(id=profile.id, name=profile.name, description=profile.description)
        for profile in registry
    ]
    return ActivitiesListResponse(activities=activities, count=len(activities))


@router.get("/activities/{activity_id}", response_model=ActivityProfile)
async def get_activity(
    activity_id: str,
    registry: ActivityRegistry = Depends(get_registry),
) -> ActivityProfile:
    """
    Get the full profile for an activity.

    Unknown ids resolve to the general profile, the same way assessments do.
    """
    return registry.get_by_id(activity_id)
