"""
Tests for the preference and history stores (in-memory SQLite).
"""

import pytest

from outdoor_risk.database import (
    FavoriteStore,
    HistoryStore,
    PreferenceStore,
    UserDataExport,
    export_user_data,
    import_user_data,
    init_database,
)
from outdoor_risk.errors import FavoriteNotFoundError, PreferencesNotFoundError
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.schemas import Location, UserPreferences, WeatherReading


@pytest.fixture
def session():
    db = init_database("sqlite://")
    yield db
    db.close()


@pytest.fixture
def aggregator():
    return RiskAggregator()


def _reading(**overrides):
    data = {
        "temp": 18,
        "feels_like": 18,
        "humidity": 50,
        "wind_speed": 3,
        "visibility": 10000,
    }
    data.update(overrides)
    return WeatherReading(**data)


def _record(store, aggregator, user_id, activity_id="general", **overrides):
    reading = _reading(**overrides)
    assessment = aggregator.assess(reading, activity_id)
    return store.record(user_id, assessment, reading, activity_id)


# PreferenceStore


def test_get_unknown_user_raises(session):
    with pytest.raises(PreferencesNotFoundError) as exc_info:
        PreferenceStore(session).get("nobody")

    assert str(exc_info.value) == "No preferences stored for user 'nobody'"


def test_get_or_default(session):
    assert PreferenceStore(session).get_or_default("nobody") == UserPreferences()


def test_save_and_get(session):
    store = PreferenceStore(session)
    preferences = UserPreferences(very_hot=26, very_cold=8, preferred_activity="hiking")

    saved = store.save("alice", preferences)

    assert saved == preferences
    assert store.get("alice") == preferences


def test_save_updates_existing(session):
    store = PreferenceStore(session)
    store.save("alice", UserPreferences(very_hot=26))
    store.save("alice", UserPreferences(very_hot=35, very_windy=10))

    stored = store.get("alice")
    assert stored.very_hot == 35
    assert stored.very_windy == 10


# HistoryStore


def test_record_and_list(session, aggregator):
    store = HistoryStore(session)
    reading = _reading()
    assessment = aggregator.assess(reading, "hiking")

    entry = store.record(
        "alice",
        assessment,
        reading,
        "hiking",
        location=Location(name="Boulder, CO", lat=40.01, lon=-105.27),
    )

    assert entry.activity_id == "hiking"
    assert entry.score == assessment.score
    assert entry.risk_level == "low"
    assert entry.location_name == "Boulder, CO"

    history = store.list("alice")
    assert [item.id for item in history] == [entry.id]
    assert store.list("bob") == []


def test_list_is_newest_first(session, aggregator):
    store = HistoryStore(session)
    first = _record(store, aggregator, "alice", "general")
    second = _record(store, aggregator, "alice", "cycling")

    history = store.list("alice")

    assert [item.id for item in history] == [second.id, first.id]
    assert [item.id for item in store.list("alice", limit=1)] == [second.id]


def test_history_is_trimmed(session, aggregator):
    store = HistoryStore(session, max_items=3)
    entries = [_record(store, aggregator, "alice") for _ in range(5)]
    _record(store, aggregator, "bob")

    history = store.list("alice")

    assert len(history) == 3
    assert [item.id for item in history] == [entry.id for entry in reversed(entries[2:])]
    assert len(store.list("bob")) == 1


def test_clear(session, aggregator):
    store = HistoryStore(session)
    _record(store, aggregator, "alice")
    _record(store, aggregator, "alice")
    _record(store, aggregator, "bob")

    assert store.clear("alice") == 2
    assert store.list("alice") == []
    assert len(store.list("bob")) == 1


def test_activity_stats(session, aggregator):
    store = HistoryStore(session)
    _record(store, aggregator, "alice", "general")
    _record(store, aggregator, "alice", "general", temp=35)
    last = _record(store, aggregator, "alice", "cycling")

    stats = store.activity_stats("alice")

    assert set(stats) == {"general", "cycling"}
    general = stats["general"]
    assert general.total_queries == 2
    # 100 and 82 (temperature 40 x 0.3 + 70)
    assert general.average_score == 91.0
    assert stats["cycling"].last_used == last.timestamp
    assert store.activity_stats("bob") == {}


def test_usage_summary(session, aggregator):
    store = HistoryStore(session)
    _record(store, aggregator, "alice", "general")
    _record(store, aggregator, "alice", "general", temp=35)
    _record(store, aggregator, "alice", "cycling")

    summary = store.usage_summary("alice")

    assert summary.total_queries == 3
    # (100 + 82 + 100) / 3
    assert summary.average_score == 94.0
    assert summary.most_used_activity == "general"


def test_usage_summary_without_history(session):
    summary = HistoryStore(session).usage_summary("nobody")

    assert summary.total_queries == 0
    assert summary.average_score == 0.0
    assert summary.most_used_activity is None


# FavoriteStore


BOULDER = Location(name="Boulder, CO", lat=40.01, lon=-105.27)
DENVER = Location(name="Denver, CO", lat=39.74, lon=-104.99)


def test_add_favorite(session):
    favorite = FavoriteStore(session).add("alice", BOULDER)

    assert favorite.name == "Boulder, CO"
    assert (favorite.latitude, favorite.longitude) == (40.01, -105.27)
    assert favorite.use_count == 1
    assert favorite.added_at == favorite.last_used


def test_nearby_location_counts_as_reuse(session):
    store = FavoriteStore(session)
    first = store.add("alice", BOULDER)

    again = store.add("alice", Location(name="Boulder downtown", lat=40.015, lon=-105.275))

    assert again.id == first.id
    assert again.name == "Boulder, CO"
    assert again.use_count == 2
    assert store.count("alice") == 1


def test_favorites_are_per_user_and_recent_first(session):
    store = FavoriteStore(session)
    boulder = store.add("alice", BOULDER)
    denver = store.add("alice", DENVER)
    store.add("bob", BOULDER)

    assert [fav.id for fav in store.list("alice")] == [denver.id, boulder.id]

    store.add("alice", BOULDER)
    assert [fav.id for fav in store.list("alice")] == [boulder.id, denver.id]
    assert store.count("bob") == 1


def test_favorites_keep_most_used(session):
    store = FavoriteStore(session, max_items=2)
    boulder = store.add("alice", BOULDER)
    store.add("alice", BOULDER)
    store.add("alice", DENVER)

    latest = store.add("alice", Location(name="Aspen, CO", lat=39.19, lon=-106.82))

    assert store.count("alice") == 2
    assert {fav.name for fav in store.list("alice")} == {"Boulder, CO", "Aspen, CO"}
    assert latest.use_count == 1


def test_remove_favorite(session):
    store = FavoriteStore(session)
    favorite = store.add("alice", BOULDER)

    with pytest.raises(FavoriteNotFoundError):
        store.remove("bob", favorite.id)

    store.remove("alice", favorite.id)
    assert store.list("alice") == []

    with pytest.raises(FavoriteNotFoundError) as exc_info:
        store.remove("alice", favorite.id)
    assert str(exc_info.value) == f"No favourite location {favorite.id} for user 'alice'"


# Export and import


def test_export_user_data(session, aggregator):
    PreferenceStore(session).save("alice", UserPreferences(very_hot=26))
    _record(HistoryStore(session), aggregator, "alice", "hiking")
    FavoriteStore(session).add("alice", BOULDER)

    export = export_user_data(session, "alice")

    assert export.version == "1.0"
    assert export.user_id == "alice"
    assert export.preferences.very_hot == 26
    assert [entry.activity_id for entry in export.history] == ["hiking"]
    assert [fav.name for fav in export.favorites] == ["Boulder, CO"]


def test_export_for_unknown_user_is_empty(session):
    export = export_user_data(session, "nobody")

    assert export.preferences is None
    assert export.history == []
    assert export.favorites == []


def test_import_replaces_user_data(session, aggregator):
    history = HistoryStore(session)
    _record(history, aggregator, "alice", "cycling")
    FavoriteStore(session).add("alice", BOULDER)
    FavoriteStore(session).add("alice", BOULDER)
    export = export_user_data(session, "alice")

    _record(history, aggregator, "bob", "picnic")
    summary = import_user_data(session, "bob", export)

    assert (summary.preferences, summary.history, summary.favorites) == (False, 1, 1)
    assert [entry.activity_id for entry in history.list("bob")] == ["cycling"]
    assert history.list("bob")[0].timestamp == export.history[0].timestamp
    favorites = FavoriteStore(session).list("bob")
    assert [(fav.name, fav.use_count) for fav in favorites] == [("Boulder, CO", 2)]
    assert len(history.list("alice")) == 1


def test_import_survives_json_round_trip(session, aggregator):
    PreferenceStore(session).save("alice", UserPreferences(very_hot=26, preferred_activity="hiking"))
    _record(HistoryStore(session), aggregator, "alice")
    document = export_user_data(session, "alice").model_dump_json()

    summary = import_user_data(session, "carol", UserDataExport.model_validate_json(document))

    assert summary.preferences is True
    assert PreferenceStore(session).get("carol").preferred_activity == "hiking"
    assert len(HistoryStore(session).list("carol")) == 1


def test_import_trims_history(session, aggregator):
    store = HistoryStore(session)
    for _ in range(4):
        _record(store, aggregator, "alice")
    export = export_user_data(session, "alice")

    summary = import_user_data(session, "bob", export, max_history_items=2)

    assert summary.history == 2
    kept = sorted(entry.timestamp for entry in store.list("bob"))
    assert kept == sorted(entry.timestamp for entry in export.history[:2])
