"""
Users API Routes

Endpoints for stored preferences, assessment history, favourite locations,
usage statistics and export/import of a user's data.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from outdoor_risk.api.models.responses import (
    ClearHistoryResponse,
    FavoritesResponse,
    HistoryResponse,
    ImportResponse,
    RemoveFavoriteResponse,
    StatsResponse,
)
from outdoor_risk.database import (
    FavoriteLocation,
    FavoriteStore,
    HistoryStore,
    PreferenceStore,
    UserDataExport,
    export_user_data,
    get_db_session,
    import_user_data,
)
from outdoor_risk.schemas import Location, UserPreferences
from outdoor_risk.settings import Settings, get_settings

router = APIRouter()


@router.get("/users/{user_id}/preferences", response_model=UserPreferences)
def get_preferences(user_id: str, db: Session = Depends(get_db_session)) -> UserPreferences:
    """
    Get stored comfort preferences.

    Raises:
        PreferencesNotFoundError: Mapped to 404 when nothing is stored
    """
    return PreferenceStore(db).get(user_id)


@router.put("/users/{user_id}/preferences", response_model=UserPreferences)
def save_preferences(
    user_id: str,
    preferences: UserPreferences,
    db: Session = Depends(get_db_session),
) -> UserPreferences:
    """Create or replace stored comfort preferences."""
    return PreferenceStore(db).save(user_id, preferences)


@router.get("/users/{user_id}/history", response_model=HistoryResponse)
def get_history(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Maximum entries to return"),
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> HistoryResponse:
    """List recorded assessments, newest first."""
    entries = HistoryStore(db, max_items=settings.MAX_HISTORY_ITEMS).list(user_id, limit=limit)
    return HistoryResponse(user_id=user_id, entries=entries, count=len(entries))


@router.delete("/users/{user_id}/history", response_model=ClearHistoryResponse)
def clear_history(
    user_id: str,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> ClearHistoryResponse:
    deleted = HistoryStore(db, max_items=settings.MAX_HISTORY_ITEMS).clear(user_id)
    return ClearHistoryResponse(user_id=user_id, deleted=deleted)


@router.get("/users/{user_id}/stats", response_model=StatsResponse)
def get_stats(
    user_id: str,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> StatsResponse:
    """Per-activity usage plus totals over the whole history."""
    history = HistoryStore(db, max_items=settings.MAX_HISTORY_ITEMS)
    summary = history.usage_summary(user_id)
    return StatsResponse(
        user_id=user_id,
        activities=history.activity_stats(user_id),
        total_queries=summary.total_queries,
        average_score=summary.average_score,
        most_used_activity=summary.most_used_activity,
        favorite_locations_count=FavoriteStore(db).count(user_id),
    )


@router.get("/users/{user_id}/favorites", response_model=FavoritesResponse)
def list_favorites(user_id: str, db: Session = Depends(get_db_session)) -> FavoritesResponse:
    favorites = FavoriteStore(db).list(user_id)
    return FavoritesResponse(user_id=user_id, favorites=favorites, count=len(favorites))


@router.post("/users/{user_id}/favorites", response_model=FavoriteLocation)
def add_favorite(
    user_id: str,
    location: Location,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> FavoriteLocation:
    """
    Save a favourite location.

    A location within 0.01° of a saved one counts as a reuse of that
    favourite instead of a new entry.
    """
    return FavoriteStore(db, max_items=settings.MAX_FAVORITE_LOCATIONS).add(user_id, location)


@router.delete("/users/{user_id}/favorites/{favorite_id}", response_model=RemoveFavoriteResponse)
def remove_favorite(
    user_id: str,
    favorite_id: int,
    db: Session = Depends(get_db_session),
) -> RemoveFavoriteResponse:
    """
    Raises:
        FavoriteNotFoundError: Mapped to 404 when the favourite does not exist
    """
    FavoriteStore(db).remove(user_id, favorite_id)
    return RemoveFavoriteResponse(user_id=user_id, favorite_id=favorite_id)


@router.get("/users/{user_id}/export", response_model=UserDataExport)
def export_data(user_id: str, db: Session = Depends(get_db_session)) -> UserDataExport:
    """Preferences, history and favourites as one JSON document."""
    return export_user_data(db, user_id)


@router.post("/users/{user_id}/import", response_model=ImportResponse)
def import_data(
    user_id: str,
    data: UserDataExport,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> ImportResponse:
    """Replace the user's stored data with an export."""
    summary = import_user_data(
        db,
        user_id,
        data,
        max_history_items=settings.MAX_HISTORY_ITEMS,
        max_favorites=settings.MAX_FAVORITE_LOCATIONS,
    )
    return ImportResponse(user_id=user_id, imported=summary)
