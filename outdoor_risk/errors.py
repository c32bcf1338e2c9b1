"""
Exception types raised by the outdoor risk package.

The scoring, aggregation and recommendation functions never raise for
validated input; these errors belong to the edges (catalog loading, payload
normalization and the user data stores).
"""


class OutdoorRiskError(Exception):
    """Base class for all package errors."""


class ActivityCatalogError(OutdoorRiskError):
    """An activity catalog is empty, has duplicate ids or malformed profiles."""


class ReadingError(OutdoorRiskError):
    """A weather payload cannot be normalized into a WeatherReading."""


class NotFoundError(OutdoorRiskError):
    """A stored record requested by a user does not exist."""


class PreferencesNotFoundError(NotFoundError):
    """No stored preferences exist for the requested user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No preferences stored for user '{user_id}'")


class FavoriteNotFoundError(NotFoundError):
    """The user has no favourite location with the requested id."""

    def __init__(self, user_id: str, favorite_id: int):
        self.user_id = user_id
        self.favorite_id = favorite_id
        super().__init__(f"No favourite location {favorite_id} for user '{user_id}'")
