"""
SQLAlchemy Database Models for Outdoor Risk

Provides persistent storage for:
- User comfort preferences and the preferred activity
- Assessment history (one row per recorded assessment)
- Favourite locations with use counts
- Per-activity and overall usage statistics derived from the history
- Export and import of everything stored for one user
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
    create_engine,
    func,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from outdoor_risk.errors import FavoriteNotFoundError, PreferencesNotFoundError
from outdoor_risk.schemas import (
    EnhancedRiskAssessment,
    Location,
    UserPreferences,
    WeatherReading,
)
from outdoor_risk.settings import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///outdoor_risk.db"
EXPORT_VERSION = "1.0"

# Saved coordinates closer than this (degrees) count as the same place
FAVORITE_MATCH_TOLERANCE = 0.01


def _utcnow() -> datetime:
    # Stored naive, in UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserPreferencesRecord(Base):
    """
    Stored comfort thresholds for one user.

    Attributes:
        id: Primary key
        user_id: Unique user identifier
        very_hot / very_cold: Temperature thresholds (°C)
        very_windy: Wind threshold (m/s)
        very_wet: Precipitation probability threshold (0-1)
        very_humid: Humidity threshold (%)
        preferred_activity: Activity id from the registry
    """

    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, unique=True, nullable=False, index=True)
    very_hot = Column(Float, nullable=False)
    very_cold = Column(Float, nullable=False)
    very_windy = Column(Float, nullable=False)
    very_wet = Column(Float, nullable=False)
    very_humid = Column(Float, nullable=False)
    preferred_activity = Column(String, nullable=False, default="general")
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_preferences(self) -> UserPreferences:
        return UserPreferences(
            very_hot=self.very_hot,
            very_cold=self.very_cold,
            very_windy=self.very_windy,
            very_wet=self.very_wet,
            very_humid=self.very_humid,
            preferred_activity=self.preferred_activity,
        )

    def __repr__(self):
        return f"<UserPreferencesRecord(user_id='{self.user_id}', activity='{self.preferred_activity}')>"


class AssessmentRecord(Base):
    """
    One recorded activity assessment.

    Attributes:
        id: Primary key
        user_id: User who requested the assessment
        timestamp: When the assessment was recorded
        location_name / latitude / longitude: Assessed location (optional)
        activity_id: Assessed activity
        risk_level: Overall tier
        score: Overall score (0-100)
        temp / humidity / wind_speed / conditions: Headline weather values
    """

    __tablename__ = "assessment_history"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    timestamp = Column(DateTime, default=_utcnow, nullable=False, index=True)
    location_name = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    activity_id = Column(String, nullable=False, index=True)
    risk_level = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    temp = Column(Float, nullable=False)
    humidity = Column(Float, nullable=False)
    wind_speed = Column(Float, nullable=False)
    conditions = Column(String, nullable=False, default="")

    def __repr__(self):
        return f"<AssessmentRecord(user_id='{self.user_id}', activity='{self.activity_id}', score={self.score})>"


class FavoriteLocationRecord(Base):
    """
    A location the user saved for quick access.

    Attributes:
        id: Primary key
        user_id: Owner of the favourite
        name: Display name
        latitude / longitude: Coordinates
        added_at: When the location was first saved
        last_used: When the location was last saved or reused
        use_count: How many times the location was saved
    """

    __tablename__ = "favorite_locations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    added_at = Column(DateTime, default=_utcnow, nullable=False)
    last_used = Column(DateTime, default=_utcnow, nullable=False)
    use_count = Column(Integer, default=1, nullable=False)

    def __repr__(self):
        return f"<FavoriteLocationRecord(user_id='{self.user_id}', name='{self.name}', uses={self.use_count})>"


class HistoryEntry(BaseModel):
    """Read model for an AssessmentRecord."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    activity_id: str
    risk_level: str
    score: int
    temp: float
    humidity: float
    wind_speed: float
    conditions: str


class ActivityStats(BaseModel):
    activity_id: str
    total_queries: int
    average_score: float
    last_used: datetime


class UsageSummary(BaseModel):
    """Totals over a user's whole history."""

    total_queries: int
    average_score: float = Field(..., description="Mean score of all recorded assessments, 0 without any")
    most_used_activity: Optional[str] = Field(None, description="Activity with the most assessments")


class FavoriteLocation(BaseModel):
    """Read model for a FavoriteLocationRecord."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    latitude: float
    longitude: float
    added_at: datetime
    last_used: datetime
    use_count: int


class UserDataExport(BaseModel):
    """Everything stored for one user, as written by export_user_data."""

    version: str = EXPORT_VERSION
    exported_at: datetime = Field(default_factory=_utcnow)
    user_id: str
    preferences: Optional[UserPreferences] = None
    history: List[HistoryEntry] = Field(default_factory=list)
    favorites: List[FavoriteLocation] = Field(default_factory=list)


class ImportSummary(BaseModel):
    preferences: bool = Field(..., description="Whether preferences were replaced")
    history: int = Field(..., description="History entries stored")
    favorites: int = Field(..., description="Favourite locations stored")


class PreferenceStore:
    """Reads and writes user preferences."""

    def __init__(self, session: Session):
        self.session = session

    def _record(self, user_id: str) -> Optional[UserPreferencesRecord]:
        return (
            self.session.query(UserPreferencesRecord)
            .filter(UserPreferencesRecord.user_id == user_id)
            .one_or_none()
        )

    def get(self, user_id: str) -> UserPreferences:
        """
        Raises:
            PreferencesNotFoundError: If nothing is stored for the user
        """
        record = self._record(user_id)
        if record is None:
            raise PreferencesNotFoundError(user_id)
        return record.to_preferences()

    def find(self, user_id: str) -> Optional[UserPreferences]:
        record = self._record(user_id)
        return record.to_preferences() if record is not None else None

    def get_or_default(self, user_id: str) -> UserPreferences:
        return self.find(user_id) or UserPreferences()

    def save(self, user_id: str, preferences: UserPreferences) -> UserPreferences:
        """Insert or update the user's preferences."""
        record = self._record(user_id)
        if record is None:
            record = UserPreferencesRecord(user_id=user_id)
            self.session.add(record)

        record.very_hot = preferences.very_hot
        record.very_cold = preferences.very_cold
        record.very_windy = preferences.very_windy
        record.very_wet = preferences.very_wet
        record.very_humid = preferences.very_humid
        record.preferred_activity = preferences.preferred_activity

        self.session.commit()
        logger.info("Saved preferences for user '%s'", user_id)
        return record.to_preferences()


class HistoryStore:
    """Records assessments and answers history and statistics queries."""

    def __init__(self, session: Session, max_items: int = 100):
        self.session = session
        self.max_items = max_items

    def record(
        self,
        user_id: str,
        assessment: EnhancedRiskAssessment,
        reading: WeatherReading,
        activity_id: str,
        location: Optional[Location] = None,
    ) -> HistoryEntry:
        """Store one assessment and trim the user's history to ``max_items``."""
        record = AssessmentRecord(
            user_id=user_id,
            timestamp=_utcnow(),
            location_name=location.name if location else None,
            latitude=location.lat if location else None,
            longitude=location.lon if location else None,
            activity_id=activity_id,
            risk_level=assessment.overall.value,
            score=assessment.score,
            temp=reading.temp,
            humidity=reading.humidity,
            wind_speed=reading.wind_speed,
            conditions=reading.condition_summary(),
        )
        self.session.add(record)
        self.session.flush()

        stale_ids = [
            row.id
            for row in self._user_query(user_id)
            .offset(self.max_items)
            .with_entities(AssessmentRecord.id)
            .all()
        ]
        if stale_ids:
            self.session.query(AssessmentRecord).filter(
                AssessmentRecord.id.in_(stale_ids)
            ).delete(synchronize_session=False)
            logger.debug("Trimmed %d history entries for user '%s'", len(stale_ids), user_id)

        self.session.commit()
        return HistoryEntry.model_validate(record)

    def _user_query(self, user_id: str):
        return (
            self.session.query(AssessmentRecord)
            .filter(AssessmentRecord.user_id == user_id)
            .order_by(AssessmentRecord.timestamp.desc(), AssessmentRecord.id.desc())
        )

    def list(self, user_id: str, limit: Optional[int] = None) -> List[HistoryEntry]:
        """Newest first."""
        query = self._user_query(user_id)
        if limit:
            query = query.limit(limit)
        return [HistoryEntry.model_validate(record) for record in query.all()]

    def clear(self, user_id: str) -> int:
        deleted = (
            self.session.query(AssessmentRecord)
            .filter(AssessmentRecord.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        logger.info("Cleared %d history entries for user '%s'", deleted, user_id)
        return deleted

    def activity_stats(self, user_id: str) -> Dict[str, ActivityStats]:
        """Query count, average score and last use per activity."""
        rows = (
            self.session.query(
                AssessmentRecord.activity_id,
                func.count(AssessmentRecord.id),
                func.avg(AssessmentRecord.score),
                func.max(AssessmentRecord.timestamp),
            )
            .filter(AssessmentRecord.user_id == user_id)
            .group_by(AssessmentRecord.activity_id)
            .all()
        )
        return {
            activity_id: ActivityStats(
                activity_id=activity_id,
                total_queries=count,
                average_score=round(float(average), 2),
                last_used=last_used,
            )
            for activity_id, count, average, last_used in rows
        }

    def usage_summary(self, user_id: str) -> UsageSummary:
        """
        Total queries, mean score and most used activity.

        Ties for the most used activity go to the one used most recently.
        """
        stats = self.activity_stats(user_id)
        total, average = (
            self.session.query(func.count(AssessmentRecord.id), func.avg(AssessmentRecord.score))
            .filter(AssessmentRecord.user_id == user_id)
            .one()
        )
        most_used = max(
            stats.values(),
            key=lambda item: (item.total_queries, item.last_used),
            default=None,
        )
        return UsageSummary(
            total_queries=total,
            average_score=round(float(average), 2) if average is not None else 0.0,
            most_used_activity=most_used.activity_id if most_used else None,
        )


class FavoriteStore:
    """
    Saved locations per user.

    Saving a location within FAVORITE_MATCH_TOLERANCE of an existing
    favourite bumps its use count instead of adding a row. Each user keeps
    at most ``max_items`` favourites; the least used are dropped first.
    """

    def __init__(self, session: Session, max_items: int = 20):
        self.session = session
        self.max_items = max_items

    def _user_query(self, user_id: str):
        return self.session.query(FavoriteLocationRecord).filter(FavoriteLocationRecord.user_id == user_id)

    def add(self, user_id: str, location: Location) -> FavoriteLocation:
        """Save a location, or mark a nearby saved one as used again."""
        now = _utcnow()
        record = (
            self._user_query(user_id)
            .filter(
                func.abs(FavoriteLocationRecord.latitude - location.lat) < FAVORITE_MATCH_TOLERANCE,
                func.abs(FavoriteLocationRecord.longitude - location.lon) < FAVORITE_MATCH_TOLERANCE,
            )
            .order_by(FavoriteLocationRecord.id)
            .first()
        )

        if record is None:
            record = FavoriteLocationRecord(
                user_id=user_id,
                name=location.name,
                latitude=location.lat,
                longitude=location.lon,
                added_at=now,
                last_used=now,
                use_count=1,
            )
            self.session.add(record)
        else:
            record.last_used = now
            record.use_count += 1
        self.session.flush()
        favorite = FavoriteLocation.model_validate(record)

        self._trim(user_id)
        self.session.commit()
        return favorite

    def _trim(self, user_id: str) -> None:
        stale_ids = [
            row.id
            for row in self._user_query(user_id)
            .order_by(
                FavoriteLocationRecord.use_count.desc(),
                FavoriteLocationRecord.last_used.desc(),
                FavoriteLocationRecord.id.desc(),
            )
            .offset(self.max_items)
            .with_entities(FavoriteLocationRecord.id)
            .all()
        ]
        if stale_ids:
            self.session.query(FavoriteLocationRecord).filter(
                FavoriteLocationRecord.id.in_(stale_ids)
            ).delete(synchronize_session=False)
            logger.debug("Dropped %d favourite locations for user '%s'", len(stale_ids), user_id)

    def remove(self, user_id: str, favorite_id: int) -> None:
        """
        Raises:
            FavoriteNotFoundError: If the user has no favourite with this id
        """
        deleted = (
            self._user_query(user_id)
            .filter(FavoriteLocationRecord.id == favorite_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise FavoriteNotFoundError(user_id, favorite_id)
        self.session.commit()

    def list(self, user_id: str) -> List[FavoriteLocation]:
        """Most recently used first."""
        query = self._user_query(user_id).order_by(
            FavoriteLocationRecord.last_used.desc(), FavoriteLocationRecord.id.desc()
        )
        return [FavoriteLocation.model_validate(record) for record in query.all()]

    def count(self, user_id: str) -> int:
        return self._user_query(user_id).count()


# Export and import


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def export_user_data(session: Session, user_id: str) -> UserDataExport:
    """Collect preferences, history and favourites stored for one user."""
    preferences = PreferenceStore(session).find(user_id)
    history = (
        session.query(AssessmentRecord)
        .filter(AssessmentRecord.user_id == user_id)
        .order_by(AssessmentRecord.timestamp.desc(), AssessmentRecord.id.desc())
        .all()
    )
    return UserDataExport(
        user_id=user_id,
        preferences=preferences,
        history=[HistoryEntry.model_validate(record) for record in history],
        favorites=FavoriteStore(session).list(user_id),
    )


def import_user_data(
    session: Session,
    user_id: str,
    data: UserDataExport,
    max_history_items: int = 100,
    max_favorites: int = 20,
) -> ImportSummary:
    """
    Replace the user's history and favourites with the exported ones.

    Preferences are replaced only when the export carries them. Imported
    rows get new ids under ``user_id``; their timestamps and counts are
    kept. History keeps the newest ``max_history_items`` entries and
    favourites the ``max_favorites`` most used.
    """
    if data.version != EXPORT_VERSION:
        logger.warning("Importing user data with export version %s", data.version)

    session.query(AssessmentRecord).filter(AssessmentRecord.user_id == user_id).delete(
        synchronize_session=False
    )
    session.query(FavoriteLocationRecord).filter(FavoriteLocationRecord.user_id == user_id).delete(
        synchronize_session=False
    )

    history = sorted(data.history, key=lambda entry: _naive_utc(entry.timestamp), reverse=True)
    history = history[:max_history_items]
    # Oldest first, so ids follow time order
    for entry in reversed(history):
        session.add(
            AssessmentRecord(
                user_id=user_id,
                **entry.model_dump(exclude={"id", "timestamp"}),
                timestamp=_naive_utc(entry.timestamp),
            )
        )

    favorites = sorted(data.favorites, key=lambda fav: (fav.use_count, _naive_utc(fav.last_used)), reverse=True)
    favorites = favorites[:max_favorites]
    for favorite in favorites:
        session.add(
            FavoriteLocationRecord(
                user_id=user_id,
                name=favorite.name,
                latitude=favorite.latitude,
                longitude=favorite.longitude,
                added_at=_naive_utc(favorite.added_at),
                last_used=_naive_utc(favorite.last_used),
                use_count=favorite.use_count,
            )
        )
    session.commit()

    if data.preferences is not None:
        PreferenceStore(session).save(user_id, data.preferences)

    logger.info(
        "Imported %d history entries and %d favourites for user '%s'",
        len(history),
        len(favorites),
        user_id,
    )
    return ImportSummary(
        preferences=data.preferences is not None,
        history=len(history),
        favorites=len(favorites),
    )


# Database connection and session management


def get_engine(database_url: str = DEFAULT_DATABASE_URL):
    """
    Create SQLAlchemy engine.

    Args:
        database_url: Database connection string (default: SQLite file)

    Returns:
        SQLAlchemy Engine instance
    """
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=False, **kwargs)


def get_session_factory(engine):
    """
    Create session factory.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_database(database_url: str = DEFAULT_DATABASE_URL) -> Session:
    """
    Initialize database and create all tables.

    Args:
        database_url: Database connection string

    Returns:
        SQLAlchemy Session instance
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    SessionFactory = get_session_factory(engine)
    return SessionFactory()


_session_factories: Dict[str, sessionmaker] = {}


def session_factory_for(database_url: str) -> sessionmaker:
    """One engine and session factory per database URL, tables created on first use."""
    factory = _session_factories.get(database_url)
    if factory is None:
        engine = get_engine(database_url)
        Base.metadata.create_all(engine)
        factory = get_session_factory(engine)
        _session_factories[database_url] = factory
    return factory


def get_db_session():
    """
    Dependency for FastAPI to get database session.

    Yields:
        SQLAlchemy Session instance

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_db_session)):
            ...
    """
    factory = session_factory_for(get_settings().DATABASE_URL)
    db = factory()
    try:
        yield db
    finally:
        db.close()
